"""Tests for the domain layer."""

import pytest

from branchweight.domain import Branch, BranchDetail, BranchWeight, CommitWeight, ObjectRecord


class TestBranch:
    """Tests for Branch domain object."""

    def test_from_local_ref(self):
        """Local branches drop the refs/heads/ prefix."""
        branch = Branch.from_ref("refs/heads/feature/login", "abc123")
        assert branch.name == "feature/login"
        assert branch.tip == "abc123"

    def test_from_remote_ref(self):
        """Remote branches keep the remote name."""
        branch = Branch.from_ref("refs/remotes/origin/topic", "def456")
        assert branch.name == "origin/topic"

    def test_from_other_ref(self):
        """Refs outside heads/remotes keep their full name."""
        branch = Branch.from_ref("refs/tags/v1.0", "0a0a")
        assert branch.name == "refs/tags/v1.0"

    def test_is_hashable(self):
        """Branches are frozen and usable as dict keys."""
        a = Branch("x", "1")
        assert {a: 1}[Branch("x", "1")] == 1
        with pytest.raises(AttributeError):
            a.name = "y"


class TestObjectRecord:
    """Tests for ObjectRecord."""

    def test_single_contributor_is_unique(self):
        record = ObjectRecord(size=10, contributors={0})
        assert not record.is_shared

    def test_several_contributors_is_shared(self):
        record = ObjectRecord(size=10, contributors={0, 3})
        assert record.is_shared

    def test_default_contributors_not_shared(self):
        """Each record gets its own contributor set."""
        a = ObjectRecord(size=1)
        b = ObjectRecord(size=2)
        a.contributors.add(1)
        assert b.contributors == set()


class TestBranchWeight:
    """Tests for BranchWeight."""

    def test_totals(self):
        weight = BranchWeight("a", unique_size=500, shared_size=1000, unique_count=1, shared_count=1)
        assert weight.total_size == 1500
        assert weight.object_count == 2

    def test_light_dict(self):
        """Light records carry only formatted sizes."""
        weight = BranchWeight("a", unique_size=1024 * 1024, shared_size=1024 * 512,
                              unique_count=1, shared_count=1)
        assert weight.to_light_dict() == {
            'branch': 'a',
            'totalSizeMB': '1.5 MB',
            'uniqueSizeMB': '1.0 MB',
            'sharedSizeMB': '0.5 MB',
        }

    def test_full_dict(self):
        """Full records add byte sizes and object counts."""
        weight = BranchWeight("b", unique_size=700, shared_size=1000, unique_count=1, shared_count=1)
        data = weight.to_dict()
        assert data['branch'] == 'b'
        assert data['totalSize'] == 1700
        assert data['uniqueSize'] == 700
        assert data['sharedSize'] == 1000
        assert data['objectCount'] == 2
        assert data['uniqueObjectCount'] == 1
        assert data['sharedObjectCount'] == 1
        assert data['totalSizeMB'] == '0 MB'


class TestBranchDetail:
    """Tests for CommitWeight and BranchDetail."""

    def test_commit_to_dict(self):
        commit = CommitWeight(commit="c1", size=1024 * 200)
        assert commit.to_dict() == {'commit': 'c1', 'size': 204800, 'sizeMB': '0.2 MB'}

    def test_total_is_sum_of_commits(self):
        detail = BranchDetail("b", [CommitWeight("c1", 1000), CommitWeight("c2", 700)])
        assert detail.total_size == 1700

        data = detail.to_dict()
        assert data['branch'] == 'b'
        assert data['totalSize'] == 1700
        assert [c['commit'] for c in data['commits']] == ['c1', 'c2']

    def test_empty_detail(self):
        detail = BranchDetail("empty")
        assert detail.total_size == 0
        assert detail.to_dict()['commits'] == []
