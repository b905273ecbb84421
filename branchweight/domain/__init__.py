"""
Domain layer for branchweight.

Contains pure domain objects with no I/O or side effects:
- Branch: An unmerged branch and its tip commit
- ObjectRecord: One blob and the set of branches that reach it
- BranchWeight: Unique/shared storage totals for one branch
- CommitWeight, BranchDetail: Per-commit breakdown of a branch

Result objects provide to_dict() methods in the report key layout.
"""

from .branch import Branch, ObjectRecord
from .weight import BranchWeight, CommitWeight, BranchDetail

__all__ = [
    'Branch',
    'ObjectRecord',
    'BranchWeight',
    'CommitWeight',
    'BranchDetail',
]
