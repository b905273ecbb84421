"""
Weight result objects for branchweight.

BranchWeight carries the unique/shared totals produced by the aggregator.
CommitWeight and BranchDetail carry the per-commit drill-down, which is
computed independently and is not reconciled against BranchWeight.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, List

from ..format_utils import format_size_mb


@dataclass(frozen=True)
class BranchWeight:
    """Storage weight of one unmerged branch."""
    branch: str
    unique_size: int = 0
    shared_size: int = 0
    unique_count: int = 0
    shared_count: int = 0

    @property
    def total_size(self) -> int:
        return self.unique_size + self.shared_size

    @property
    def object_count(self) -> int:
        return self.unique_count + self.shared_count

    def to_dict(self) -> Dict[str, Any]:
        """Full report record: formatted sizes, byte sizes and object counts."""
        result = self.to_light_dict()
        result.update({
            'totalSize': self.total_size,
            'uniqueSize': self.unique_size,
            'sharedSize': self.shared_size,
            'objectCount': self.object_count,
            'uniqueObjectCount': self.unique_count,
            'sharedObjectCount': self.shared_count,
        })
        return result

    def to_light_dict(self) -> Dict[str, Any]:
        """Light report record: branch name and formatted sizes only."""
        return {
            'branch': self.branch,
            'totalSizeMB': format_size_mb(self.total_size),
            'uniqueSizeMB': format_size_mb(self.unique_size),
            'sharedSizeMB': format_size_mb(self.shared_size),
        }


@dataclass(frozen=True)
class CommitWeight:
    """Bytes of blobs added or modified by a single commit."""
    commit: str
    size: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'commit': self.commit,
            'size': self.size,
            'sizeMB': format_size_mb(self.size),
        }


@dataclass
class BranchDetail:
    """Per-commit breakdown of a branch, heaviest commit first."""
    branch: str
    commits: List[CommitWeight] = field(default_factory=list)

    @property
    def total_size(self) -> int:
        return sum(c.size for c in self.commits)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'branch': self.branch,
            'totalSize': self.total_size,
            'totalSizeMB': format_size_mb(self.total_size),
            'commits': [c.to_dict() for c in self.commits],
        }
