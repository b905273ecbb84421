"""
Per-commit weight breakdown for branchweight.

For a handful of heavy branches, walks the unmerged commits and sums the
blobs each commit adds or modifies. This is a drill-down aid: a blob
touched by several commits on the branch is counted for each of them, so
the branch total here is not expected to match its BranchWeight.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Mapping, Optional, Sequence

from ..domain import BranchDetail, BranchWeight, CommitWeight
from ..infra.git_client import GitClient, GitError
from .pipeline import collect_blob_sizes

logger = logging.getLogger(__name__)


class DetailService:
    """
    Break branch weight down per commit.

    Example:
        service = DetailService("/path/to/repo")
        details = service.expand(weights, tips, "refs/heads/main", top=5)
        for detail in details:
            print(detail.branch, len(detail.commits))
    """

    def __init__(
        self,
        repo_path: str,
        git_client: Optional[GitClient] = None,
        size_format: str = 'disk',
        max_workers: Optional[int] = None
    ):
        self.repo_path = repo_path
        self.git = git_client or GitClient()
        self.size_format = size_format
        self.max_workers = max_workers

    def commit_weights(self, tip: str, baseline: str) -> List[CommitWeight]:
        """
        Weight of every commit in ``tip --not baseline`` that adds bytes.

        Commits are returned heaviest first; equal sizes keep rev-list
        order (newest first). Commits whose added/modified blobs sum to
        zero are left out.

        Raises:
            GitError: If any underlying git command fails
        """
        weights = []
        for commit in self.git.unmerged_commits(self.repo_path, tip, baseline):
            blob_ids = self.git.changed_blob_ids(self.repo_path, commit)
            if not blob_ids:
                continue
            sizes = collect_blob_sizes(
                self.git.batch_check(self.repo_path, blob_ids, self.size_format)
            )
            size = sum(sizes.values())
            if size > 0:
                weights.append(CommitWeight(commit=commit, size=size))

        return sorted(weights, key=lambda c: c.size, reverse=True)

    def branch_detail(self, branch: str, tip: str, baseline: str) -> BranchDetail:
        return BranchDetail(branch=branch, commits=self.commit_weights(tip, baseline))

    def _try_branch_detail(self, branch: str, tip: str, baseline: str) -> Optional[BranchDetail]:
        try:
            return self.branch_detail(branch, tip, baseline)
        except GitError as e:
            logger.warning(f"Skipping commit detail for {branch}: {e}")
            return None

    def expand(
        self,
        weights: Sequence[BranchWeight],
        tips: Mapping[str, str],
        baseline: str,
        top: int
    ) -> List[BranchDetail]:
        """
        Commit-level detail for the ``top`` heaviest branches.

        Args:
            weights: Branch weights, heaviest first (as from WeightAggregator)
            tips: Branch name -> tip commit
            baseline: Baseline ref the branches are measured against
            top: Number of branches to expand

        Returns:
            One BranchDetail per expanded branch, in the order of ``weights``.
            Branches whose expansion fails are left out.
        """
        selected = [w.branch for w in weights[:max(top, 0)] if w.branch in tips]
        if not selected:
            return []

        with ThreadPoolExecutor(max_workers=self.max_workers or None) as executor:
            results: Dict[str, Optional[BranchDetail]] = dict(zip(
                selected,
                executor.map(lambda name: self._try_branch_detail(name, tips[name], baseline), selected)
            ))

        return [results[name] for name in selected if results[name] is not None]
