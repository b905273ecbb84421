"""
Unmerged object pipeline for branchweight.

Chains ``git rev-list --objects`` into ``git cat-file --batch-check`` for
one branch and turns the result into a blob id -> size map.

The two processes are connected by a forwarding thread: it reads object
ids from rev-list's stdout and writes them to cat-file's stdin while the
calling thread reads cat-file's stdout. Draining both pipes from a single
thread deadlocks as soon as cat-file blocks on a full stdout pipe while
we block writing to its full stdin pipe.
"""

import logging
import threading
from typing import Dict, Iterable, Iterator, Optional, TextIO

from ..infra.git_client import GitClient, GitError, ObjectLine, parse_batch_check_line

logger = logging.getLogger(__name__)


def collect_blob_sizes(records: Iterable[ObjectLine]) -> Dict[str, int]:
    """
    Build a blob id -> size map from ``(id, type, size)`` records.

    Trees, commits and tags are skipped. A record whose size is not a
    non-negative integer is dropped on its own. Repeated ids collapse.

    Example:
        collect_blob_sizes([("a1", "blob", "12"), ("t1", "tree", "40")])
        -> {"a1": 12}
    """
    blobs: Dict[str, int] = {}
    for oid, obj_type, size_token in records:
        if obj_type != "blob":
            continue
        try:
            size = int(size_token)
        except ValueError:
            continue
        if size < 0:
            continue
        blobs[oid] = size
    return blobs


def forward_object_ids(source: TextIO, sink: TextIO) -> None:
    """
    Copy the first token of every line from ``source`` to ``sink``.

    Closes ``sink`` when done so the reading process sees end of input.
    A broken pipe means the reader has gone away and ends forwarding.
    """
    try:
        for line in source:
            parts = line.split(None, 1)
            if parts:
                sink.write(parts[0] + "\n")
    except (BrokenPipeError, ValueError) as e:
        logger.debug(f"Object id forwarding stopped early: {e}")
    finally:
        try:
            sink.close()
        except (BrokenPipeError, ValueError) as e:
            logger.debug(f"Closing object id pipe: {e}")


class ObjectPipeline:
    """
    Stream the objects reachable from one revision and not from another.

    Example:
        pipeline = ObjectPipeline("/path/to/repo")
        sizes = pipeline.collect(tip, "refs/heads/main")
    """

    def __init__(
        self,
        repo_path: str,
        git_client: Optional[GitClient] = None,
        size_format: str = 'disk'
    ):
        """
        Initialize ObjectPipeline.

        Args:
            repo_path: Path to the git repository
            git_client: GitClient instance (creates new if None)
            size_format: "disk" for packed size, "logical" for content size
        """
        self.repo_path = repo_path
        self.git = git_client or GitClient()
        self.size_format = size_format

    def iter_objects(self, include: str, exclude: str) -> Iterator[ObjectLine]:
        """
        Yield ``(id, type, size)`` for every object in ``include --not exclude``.

        Lines from cat-file with fewer than three tokens are skipped.

        Raises:
            GitError: If either process cannot be started, or either exits
                      with a non-zero status after the stream is consumed
        """
        rev_list = self.git.spawn_object_walk(self.repo_path, include, exclude)
        try:
            cat_file = self.git.spawn_batch_check(self.repo_path, self.size_format)
        except GitError:
            rev_list.kill()
            rev_list.stdout.close()
            rev_list.wait()
            raise

        forwarder = threading.Thread(
            target=forward_object_ids,
            args=(rev_list.stdout, cat_file.stdin),
            name=f"forward-{include[:12]}",
            daemon=True,
        )
        forwarder.start()

        finished = False
        try:
            for line in cat_file.stdout:
                record = parse_batch_check_line(line)
                if record is not None:
                    yield record
            finished = True
        finally:
            if not finished:
                # Consumer stopped early or failed: tear both processes down
                for process in (rev_list, cat_file):
                    if process.poll() is None:
                        process.kill()
            forwarder.join()
            rev_list.stdout.close()
            cat_file.stdout.close()
            rev_code = rev_list.wait()
            cat_code = cat_file.wait()

        if rev_code != 0:
            raise GitError(f"git rev-list exited with status {rev_code} for {include}",
                           returncode=rev_code)
        if cat_code != 0:
            raise GitError(f"git cat-file exited with status {cat_code} for {include}",
                           returncode=cat_code)

    def collect(self, include: str, exclude: str) -> Dict[str, int]:
        """Blob id -> size for everything reachable from ``include`` but not ``exclude``."""
        return collect_blob_sizes(self.iter_objects(include, exclude))
