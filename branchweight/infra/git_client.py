"""
Git client infrastructure for branchweight.

Provides a clean abstraction over git command execution.
All git operations go through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from business logic

Two kinds of calls are offered: short commands whose whole output is
captured (``_run``), and long-running streaming processes that are handed
back to the caller as ``subprocess.Popen`` objects (``spawn_*``).
"""

import subprocess
from typing import Optional, List, Tuple, Iterable, Sequence
import logging

from ..domain import Branch

logger = logging.getLogger(__name__)

SIZE_FORMATS = {
    'disk': '%(objectsize:disk)',
    'logical': '%(objectsize)',
}

ObjectLine = Tuple[str, str, str]


class GitError(Exception):
    """A git process could not be started or exited abnormally."""

    def __init__(self, message: str, command: Optional[Sequence[str]] = None,
                 returncode: Optional[int] = None):
        super().__init__(message)
        self.command = list(command) if command else []
        self.returncode = returncode


def batch_check_format(size_format: str = 'disk') -> str:
    """Return the ``--batch-check`` format string for a size format name."""
    try:
        size_field = SIZE_FORMATS[size_format]
    except KeyError:
        raise ValueError(
            f"Unknown size format {size_format!r} (expected one of: {', '.join(SIZE_FORMATS)})"
        ) from None
    return f"%(objectname) %(objecttype) {size_field}"


def parse_batch_check_line(line: str) -> Optional[ObjectLine]:
    """
    Split one ``git cat-file --batch-check`` output line.

    Returns:
        (object id, object type, size token), or None when the line has
        fewer than three tokens (``<id> missing``, stray diagnostics)
    """
    parts = line.split()
    if len(parts) < 3:
        return None
    return parts[0], parts[1], parts[2]


class GitClient:
    """
    Abstraction over git commands.

    Example:
        client = GitClient()
        baseline = client.detect_baseline("/path/to/repo", ["refs/heads/main"])
        for branch in client.list_unmerged_branches("/path/to/repo", baseline):
            print(branch.name, branch.tip)
    """

    def __init__(self, executable: str = "git", timeout: Optional[int] = None):
        """
        Initialize GitClient.

        Args:
            executable: git binary to invoke (default: "git" from PATH)
            timeout: Timeout in seconds for captured commands (default: none).
                     Streaming processes are never timed out.
        """
        self.executable = executable
        self.timeout = timeout

    def _command(self, args: Sequence[str]) -> List[str]:
        return [self.executable, *args]

    def _run(
        self,
        args: Sequence[str],
        cwd: str,
        input: Optional[str] = None
    ) -> Tuple[Optional[str], int]:
        """
        Run a git command and capture its output.

        Args:
            args: Arguments after the git executable
            cwd: Working directory
            input: Text fed to the process's stdin

        Returns:
            Tuple of (stdout, returncode); (None, -1) if git could not run
        """
        cmd = self._command(args)
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                input=input,
                capture_output=True,
                text=True,
                encoding='utf-8',
                errors='replace',
                timeout=self.timeout
            )
            return result.stdout, result.returncode

        except subprocess.TimeoutExpired:
            logger.warning(f"Git command timed out: {' '.join(cmd)}")
            return None, -1
        except OSError as e:
            logger.error(f"Git command failed: {' '.join(cmd)} - {e}")
            return None, -1

    def _spawn(self, args: Sequence[str], cwd: str, with_stdin: bool = False) -> subprocess.Popen:
        """
        Start a git process with a piped stdout (and stdin if requested).

        Raises:
            GitError: If the process cannot be started
        """
        cmd = self._command(args)
        try:
            return subprocess.Popen(
                cmd,
                cwd=cwd,
                stdin=subprocess.PIPE if with_stdin else subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                encoding='utf-8',
                errors='replace',
            )
        except OSError as e:
            raise GitError(f"Failed to spawn {' '.join(cmd)}: {e}", command=cmd) from e

    def is_git_repo(self, path: str) -> bool:
        """Check if path is inside a git repository (bare or not)."""
        output, code = self._run(["rev-parse", "--git-dir"], cwd=path)
        return code == 0 and bool(output and output.strip())

    def resolve(self, path: str, rev: str) -> Optional[str]:
        """Resolve a revision to a commit id, or None if it does not exist."""
        output, code = self._run(["rev-parse", "--verify", "--quiet", f"{rev}^{{commit}}"], cwd=path)
        if code == 0 and output:
            return output.strip()
        return None

    def detect_baseline(self, path: str, candidates: Iterable[str]) -> Optional[str]:
        """
        Return the first candidate ref that resolves in the repository.

        Args:
            path: Path to git repository
            candidates: Ref names in priority order

        Returns:
            The matching ref name, or None if none resolves
        """
        for name in candidates:
            if self.resolve(path, name):
                return name
        return None

    def list_unmerged_branches(
        self,
        path: str,
        merged_into: str = "HEAD",
        include_remotes: bool = True
    ) -> List[Branch]:
        """
        List branches whose tips are not merged into ``merged_into``.

        Symbolic ``*/HEAD`` refs are skipped.

        Raises:
            GitError: If git for-each-ref fails
        """
        args = [
            "for-each-ref",
            "--format=%(refname) %(objectname)",
            f"--no-merged={merged_into}",
            "refs/heads",
        ]
        if include_remotes:
            args.append("refs/remotes")

        output, code = self._run(args, cwd=path)
        if code != 0 or output is None:
            raise GitError(f"git for-each-ref failed in {path}", command=self._command(args),
                           returncode=code)

        branches = []
        for line in output.splitlines():
            parts = line.split()
            if len(parts) < 2:
                continue
            refname, oid = parts[0], parts[1]
            if refname.endswith("/HEAD"):
                continue
            branches.append(Branch.from_ref(refname, oid))

        return branches

    def spawn_object_walk(self, path: str, include: str, exclude: str) -> subprocess.Popen:
        """Start ``git rev-list --objects <include> --not <exclude>``."""
        return self._spawn(["rev-list", "--objects", include, "--not", exclude], cwd=path)

    def spawn_batch_check(self, path: str, size_format: str = 'disk') -> subprocess.Popen:
        """Start ``git cat-file --batch-check`` reading object ids on stdin."""
        args = ["cat-file", f"--batch-check={batch_check_format(size_format)}"]
        return self._spawn(args, cwd=path, with_stdin=True)

    def batch_check(self, path: str, oids: Sequence[str], size_format: str = 'disk') -> List[ObjectLine]:
        """
        Look up type and size for a known, bounded list of object ids.

        The ids are passed in one write through ``subprocess.run``, which
        drains stdout while feeding stdin.

        Raises:
            GitError: If git cat-file fails
        """
        if not oids:
            return []
        args = ["cat-file", f"--batch-check={batch_check_format(size_format)}"]
        output, code = self._run(args, cwd=path, input="\n".join(oids) + "\n")
        if code != 0 or output is None:
            raise GitError(f"git cat-file failed in {path}", command=self._command(args),
                           returncode=code)

        records = []
        for line in output.splitlines():
            record = parse_batch_check_line(line)
            if record is not None:
                records.append(record)
        return records

    def unmerged_commits(self, path: str, include: str, exclude: str) -> List[str]:
        """
        List commits reachable from ``include`` but not from ``exclude``, newest first.

        Raises:
            GitError: If git rev-list fails
        """
        args = ["rev-list", include, "--not", exclude]
        output, code = self._run(args, cwd=path)
        if code != 0 or output is None:
            raise GitError(f"git rev-list failed for {include}", command=self._command(args),
                           returncode=code)
        return [line.strip() for line in output.splitlines() if line.strip()]

    def changed_blob_ids(self, path: str, commit: str) -> List[str]:
        """
        Blob ids of paths added or modified by a commit relative to its parent.

        Root commits are diffed against the empty tree. Merge commits produce
        no plain diff-tree output and therefore report no blobs.

        Raises:
            GitError: If git diff-tree fails
        """
        args = ["diff-tree", "-r", "--root", "--diff-filter=AM", "--no-commit-id", commit]
        output, code = self._run(args, cwd=path)
        if code != 0 or output is None:
            raise GitError(f"git diff-tree failed for {commit}", command=self._command(args),
                           returncode=code)

        blobs = []
        for line in output.splitlines():
            # :<old mode> <new mode> <old id> <new id> <status>\t<path>
            parts = line.split()
            if len(parts) >= 4:
                blobs.append(parts[3])
        return blobs
