"""
Branch and object domain objects for branchweight.
"""

from dataclasses import dataclass, field
from typing import Set


REF_PREFIXES = ('refs/heads/', 'refs/remotes/')


@dataclass(frozen=True)
class Branch:
    """An unmerged branch: short ref name plus the commit it points at."""
    name: str
    tip: str

    @classmethod
    def from_ref(cls, refname: str, tip: str) -> 'Branch':
        """
        Create a Branch from a full ref name.

        Example:
            Branch.from_ref("refs/remotes/origin/topic", "ab12...")
            -> Branch(name="origin/topic", tip="ab12...")
        """
        name = refname
        for prefix in REF_PREFIXES:
            if refname.startswith(prefix):
                name = refname[len(prefix):]
                break
        return cls(name=name, tip=tip)


@dataclass
class ObjectRecord:
    """
    A blob seen during the merge phase.

    ``size`` is fixed at first sighting; object ids are content addressed
    so later sightings of the same id only add to ``contributors``.
    """
    size: int
    contributors: Set[int] = field(default_factory=set)

    @property
    def is_shared(self) -> bool:
        return len(self.contributors) > 1
