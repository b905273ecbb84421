"""
Parallel branch scheduler for branchweight.

Runs one object pipeline per branch on a bounded thread pool. The work
is subprocess I/O, so threads are enough to keep every core busy.
"""

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, Generator, List, Optional, Sequence, Tuple

from ..domain import Branch

logger = logging.getLogger(__name__)

# (tip, baseline) -> blob id -> size
CollectFn = Callable[[str, str], Dict[str, int]]
# (branches done, branches total, branch name)
ProgressFn = Callable[[int, int, str], None]


def default_worker_count() -> int:
    return os.cpu_count() or 1


class BranchScheduler:
    """
    Collect unmerged blobs for many branches concurrently.

    Failures are contained per branch: a branch whose collection raises is
    logged and dropped, the rest of the run continues.

    Example:
        pipeline = ObjectPipeline(repo_path)
        scheduler = BranchScheduler(pipeline.collect, max_workers=8)
        for index, blobs in scheduler.run(branches, "refs/heads/main"):
            aggregator.add_branch(index, blobs)
    """

    def __init__(self, collect: CollectFn, max_workers: Optional[int] = None):
        """
        Initialize BranchScheduler.

        Args:
            collect: Function returning the blob map for (tip, baseline)
            max_workers: Pool size; None or 0 means one worker per CPU
        """
        self.collect = collect
        self.max_workers = max_workers or default_worker_count()
        self.failed: List[str] = []

    def _collect_one(self, branch: Branch, baseline: str) -> Optional[Dict[str, int]]:
        """Blob map for one branch, or None if its collection failed."""
        started = time.monotonic()
        try:
            blobs = self.collect(branch.tip, baseline)
        except Exception as e:
            logger.warning(f"Skipping branch {branch.name}: {e}")
            return None
        logger.debug(f"{branch.name}: {len(blobs)} blobs in {time.monotonic() - started:.2f}s")
        return blobs

    def run(
        self,
        branches: Sequence[Branch],
        baseline: str,
        on_progress: Optional[ProgressFn] = None
    ) -> Generator[Tuple[int, Dict[str, int]], None, None]:
        """
        Yield ``(branch index, blob map)`` as branches complete.

        Only non-empty maps are yielded. Completion order is unspecified;
        the index ties each result back to ``branches``.
        """
        self.failed = []
        total = len(branches)
        if total == 0:
            return

        with ThreadPoolExecutor(max_workers=min(self.max_workers, total)) as executor:
            futures = {
                executor.submit(self._collect_one, branch, baseline): index
                for index, branch in enumerate(branches)
            }

            for done, future in enumerate(as_completed(futures), 1):
                index = futures[future]
                blobs = future.result()
                if blobs is None:
                    self.failed.append(branches[index].name)
                if on_progress:
                    on_progress(done, total, branches[index].name)
                if blobs:
                    yield index, blobs

    def collect_all(
        self,
        branches: Sequence[Branch],
        baseline: str,
        on_progress: Optional[ProgressFn] = None
    ) -> List[Tuple[int, Dict[str, int]]]:
        """Like run(), but collected into a list ordered by branch index."""
        return sorted(self.run(branches, baseline, on_progress), key=lambda pair: pair[0])
