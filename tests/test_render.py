"""
Tests for branchweight/render.py rendering functions.

Output is captured through a wide in-memory rich Console so table
wrapping does not depend on the terminal running the tests.
"""
import pytest
from io import StringIO
from unittest.mock import patch
from rich.console import Console

from branchweight import render
from branchweight.domain import BranchDetail, BranchWeight, CommitWeight

MB = 1024 * 1024


@pytest.fixture
def output():
    buffer = StringIO()
    with patch.object(render, 'console', Console(file=buffer, width=160, color_system=None)):
        yield buffer


class TestRenderBranchTable:
    """Tests for render_branch_table."""

    weights = [
        BranchWeight("feature-b", unique_size=2 * MB, shared_size=MB, unique_count=3, shared_count=1),
        BranchWeight("feature-a", unique_size=MB // 2, shared_size=MB, unique_count=1, shared_count=1),
    ]

    def test_empty_shows_message(self, output):
        render.render_branch_table([])
        assert "No unmerged branches" in output.getvalue()

    def test_rows(self, output):
        render.render_branch_table(self.weights)
        text = output.getvalue()
        assert "feature-b" in text
        assert "feature-a" in text
        assert "3.0 MB" in text
        assert "3/1" in text

    def test_limit(self, output):
        render.render_branch_table(self.weights, limit=1)
        text = output.getvalue()
        assert "feature-b" in text
        assert "feature-a" not in text
        assert "and 1 more branches" in text


class TestRenderSummary:
    def test_summary(self, output):
        render.render_summary({
            'totalBranches': 2,
            'totalUniqueSizeMB': '2.5 MB',
            'totalSharedSizeMB': '2.0 MB',
        })
        text = output.getvalue()
        assert "Branches: 2" in text
        assert "2.5 MB" in text
        assert "2.0 MB" in text


class TestRenderDetailTable:
    def test_commits_truncated(self, output):
        commits = [CommitWeight(f"c{i:02d}" + "a" * 37, MB) for i in range(12)]
        render.render_detail_table(BranchDetail("feature-b", commits), limit=3)
        text = output.getvalue()
        assert "feature-b" in text
        assert "c02aaaaaaaaa" in text
        assert "c03aaaaaaaaa" not in text
