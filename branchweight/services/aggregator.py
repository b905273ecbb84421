"""
Weight aggregation for branchweight.

Merges per-branch blob maps into one map of ObjectRecord keyed by blob id,
then reduces it to a BranchWeight per branch.

A blob reached by a single branch counts as unique to it. A blob reached
by several branches counts in full as shared for each of them: its
storage is only reclaimed once every one of those branches is deleted.
"""

import logging
import threading
from typing import Dict, List, Mapping, Sequence

from ..domain import BranchWeight, ObjectRecord

logger = logging.getLogger(__name__)


class WeightAggregator:
    """
    Accumulate blob observations and compute branch weights.

    add_branch() may be called from several threads; the object map is
    only ever written under the aggregator's lock.

    Example:
        aggregator = WeightAggregator()
        aggregator.add_branch(0, {"x": 1000, "y": 500})
        aggregator.add_branch(1, {"x": 1000, "z": 700})
        weights = aggregator.weights(["a", "b"])
        # [BranchWeight("b", unique=700, shared=1000), BranchWeight("a", ...)]
    """

    def __init__(self):
        self._objects: Dict[str, ObjectRecord] = {}
        self._lock = threading.Lock()

    @property
    def objects(self) -> Mapping[str, ObjectRecord]:
        return self._objects

    def __len__(self) -> int:
        return len(self._objects)

    def add_branch(self, branch_index: int, blobs: Mapping[str, int]) -> None:
        """
        Record that ``branch_index`` reaches every blob in ``blobs``.

        The first size seen for an id is kept.
        """
        with self._lock:
            for oid, size in blobs.items():
                record = self._objects.get(oid)
                if record is None:
                    self._objects[oid] = ObjectRecord(size=size, contributors={branch_index})
                else:
                    record.contributors.add(branch_index)

    def weights(self, branch_names: Sequence[str]) -> List[BranchWeight]:
        """
        Reduce the object map to branch weights.

        Args:
            branch_names: Branch names indexed like the add_branch() calls

        Returns:
            Weights of branches with at least one object, heaviest first;
            equal totals keep the order of ``branch_names``
        """
        count = len(branch_names)
        unique_size = [0] * count
        shared_size = [0] * count
        unique_count = [0] * count
        shared_count = [0] * count

        with self._lock:
            for record in self._objects.values():
                if record.is_shared:
                    for index in record.contributors:
                        shared_size[index] += record.size
                        shared_count[index] += 1
                else:
                    (index,) = record.contributors
                    unique_size[index] += record.size
                    unique_count[index] += 1

        results = [
            BranchWeight(
                branch=branch_names[i],
                unique_size=unique_size[i],
                shared_size=shared_size[i],
                unique_count=unique_count[i],
                shared_count=shared_count[i],
            )
            for i in range(count)
            if unique_count[i] + shared_count[i] > 0
        ]

        # sorted() is stable, so ties keep discovery order
        return sorted(results, key=lambda w: w.total_size, reverse=True)
