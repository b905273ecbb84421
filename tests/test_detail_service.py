"""Tests for the per-commit detail service."""

from unittest.mock import MagicMock

from branchweight.domain import BranchWeight
from branchweight.infra.git_client import GitClient, GitError
from branchweight.services.detail_service import DetailService


def mock_git(commits, changes, sizes):
    """
    Build a GitClient mock.

    Args:
        commits: tip -> commit ids, newest first
        changes: commit -> changed blob ids
        sizes: blob id -> size
    """
    git = MagicMock(spec=GitClient)

    def unmerged_commits(path, include, exclude):
        if include not in commits:
            raise GitError(f"unknown revision {include}")
        return commits[include]

    git.unmerged_commits.side_effect = unmerged_commits
    git.changed_blob_ids.side_effect = lambda path, commit: changes.get(commit, [])
    git.batch_check.side_effect = lambda path, oids, size_format: [
        (oid, "blob", str(sizes[oid])) for oid in oids
    ]
    return git


class TestCommitWeights:
    """Tests for DetailService.commit_weights."""

    def test_heaviest_first(self):
        git = mock_git(
            commits={"tip": ["c3", "c2", "c1"]},
            changes={"c3": ["small"], "c2": ["big"], "c1": ["mid"]},
            sizes={"small": 10, "big": 900, "mid": 400},
        )
        service = DetailService("/repo", git_client=git)

        weights = service.commit_weights("tip", "main")

        assert [(c.commit, c.size) for c in weights] == [("c2", 900), ("c1", 400), ("c3", 10)]

    def test_sums_blobs_per_commit(self):
        git = mock_git(
            commits={"tip": ["c1"]},
            changes={"c1": ["a", "b"]},
            sizes={"a": 100, "b": 250},
        )
        weights = DetailService("/repo", git_client=git).commit_weights("tip", "main")
        assert [(c.commit, c.size) for c in weights] == [("c1", 350)]

    def test_zero_sum_commits_dropped(self):
        """Commits adding nothing (deletions, merges, empty files) are left out."""
        git = mock_git(
            commits={"tip": ["merge", "delete", "empty", "real"]},
            changes={"empty": ["e"], "real": ["r"]},
            sizes={"e": 0, "r": 5},
        )
        weights = DetailService("/repo", git_client=git).commit_weights("tip", "main")

        assert [c.commit for c in weights] == ["real"]
        # no cat-file call for commits without changed blobs
        assert git.batch_check.call_count == 2

    def test_ties_keep_rev_list_order(self):
        git = mock_git(
            commits={"tip": ["newer", "older"]},
            changes={"newer": ["x"], "older": ["y"]},
            sizes={"x": 50, "y": 50},
        )
        weights = DetailService("/repo", git_client=git).commit_weights("tip", "main")
        assert [c.commit for c in weights] == ["newer", "older"]

    def test_size_format_passed_through(self):
        git = mock_git(commits={"tip": ["c1"]}, changes={"c1": ["a"]}, sizes={"a": 1})
        DetailService("/repo", git_client=git, size_format='logical').commit_weights("tip", "main")
        git.batch_check.assert_called_once_with("/repo", ["a"], 'logical')


class TestExpand:
    """Tests for DetailService.expand."""

    def setup_method(self):
        self.git = mock_git(
            commits={"tip-a": ["a1"], "tip-b": ["b2", "b1"], "tip-c": ["c1"]},
            changes={"a1": ["xa"], "b2": ["xb2"], "b1": ["xb1"], "c1": ["xc"]},
            sizes={"xa": 10, "xb2": 20, "xb1": 30, "xc": 5},
        )
        self.weights = [
            BranchWeight("b", unique_size=50),
            BranchWeight("a", unique_size=10),
            BranchWeight("c", unique_size=5),
        ]
        self.tips = {"a": "tip-a", "b": "tip-b", "c": "tip-c"}

    def test_top_n_in_weight_order(self):
        service = DetailService("/repo", git_client=self.git, max_workers=2)

        details = service.expand(self.weights, self.tips, "main", top=2)

        assert [d.branch for d in details] == ["b", "a"]
        assert [c.commit for c in details[0].commits] == ["b1", "b2"]
        assert details[0].total_size == 50

    def test_top_zero(self):
        service = DetailService("/repo", git_client=self.git)
        assert service.expand(self.weights, self.tips, "main", top=0) == []
        self.git.unmerged_commits.assert_not_called()

    def test_top_larger_than_weights(self):
        service = DetailService("/repo", git_client=self.git)
        details = service.expand(self.weights, self.tips, "main", top=10)
        assert [d.branch for d in details] == ["b", "a", "c"]

    def test_failed_branch_left_out(self, caplog):
        tips = dict(self.tips, a="tip-gone")
        service = DetailService("/repo", git_client=self.git)

        with caplog.at_level("WARNING", logger="branchweight"):
            details = service.expand(self.weights, tips, "main", top=3)

        assert [d.branch for d in details] == ["b", "c"]
        assert "Skipping commit detail for a" in caplog.text


class TestDetailRealGit:
    """Detail against a real repository."""

    def test_feature_b_commits(self, branch_repo):
        service = DetailService(str(branch_repo.path), size_format='logical')

        detail = service.branch_detail("feature-b", branch_repo.rev_parse("feature-b"), "refs/heads/main")

        assert [(c.commit, c.size) for c in detail.commits] == [
            (branch_repo.rev_parse("feature-b~1"), 1000),
            (branch_repo.rev_parse("feature-b"), 700),
        ]
        assert detail.total_size == 1700

    def test_feature_a_single_commit(self, branch_repo):
        service = DetailService(str(branch_repo.path), size_format='logical')

        weights = service.commit_weights(branch_repo.rev_parse("feature-a"), "refs/heads/main")

        assert [(c.commit, c.size) for c in weights] == [(branch_repo.rev_parse("feature-a"), 1500)]

    def test_deletion_commit_dropped(self, branch_repo):
        branch_repo.checkout("cleanup", new=True)
        branch_repo.commit({"big.bin": b"x" * 300}, "add big")
        branch_repo.commit({"big.bin": None}, "remove big")
        service = DetailService(str(branch_repo.path), size_format='logical')

        weights = service.commit_weights(branch_repo.rev_parse("cleanup"), "refs/heads/main")

        assert [(c.commit, c.size) for c in weights] == [(branch_repo.rev_parse("cleanup~1"), 300)]
