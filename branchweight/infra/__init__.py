"""
Infrastructure layer for branchweight.

Contains abstractions for external systems:
- GitClient: Git command execution (captured and streaming)

These provide clean interfaces that can be mocked for testing.
"""

from .git_client import GitClient, GitError, parse_batch_check_line

__all__ = [
    'GitClient',
    'GitError',
    'parse_batch_check_line',
]
