"""
Index of known relations keyed by ordered entity pair, and the admissibility
test that decides whether a proposed link is new, redundant or conflicting.
"""
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Iterable, NamedTuple, Optional

from temporal_closure.logger import get_logger
from temporal_closure.relations import RelationType, TLink, invert

logger = get_logger(__name__)


class LinkStatus(IntEnum):
    """Outcome of checking a proposed link against the index."""
    ABSENT = 0
    REDUNDANT = 1
    CONFLICTING = 2


class PairKey(NamedTuple):
    first: str
    second: str

    def reversed(self) -> "PairKey":
        return PairKey(self.second, self.first)


# Stored (A,B) relation -> proposed (A,B) relations tolerated alongside it.
FORWARD_COMPATIBLE = {
    RelationType.BEFORE: {RelationType.IMMEDIATELY_BEFORE},
    RelationType.IMMEDIATELY_BEFORE: {RelationType.BEFORE},
    RelationType.AFTER: {RelationType.IMMEDIATELY_AFTER},
    RelationType.IMMEDIATELY_AFTER: {RelationType.AFTER},
}

# Unordered {proposed, stored-in-reverse} pairs that refine each other.
REVERSE_COMPATIBLE = {
    frozenset((RelationType.INCLUDES, RelationType.BEGINS)),
    frozenset((RelationType.INCLUDES, RelationType.ENDS)),
}


@dataclass(frozen=True)
class Conflict:
    """A proposed link that contradicts a relation already known for the pair."""
    first: str
    second: str
    existing: RelationType
    proposed: RelationType
    reversed: bool = False

    @property
    def existing_link(self) -> TLink:
        if self.reversed:
            return TLink(self.second, self.first, self.existing)
        return TLink(self.first, self.second, self.existing)

    @property
    def proposed_link(self) -> TLink:
        return TLink(self.first, self.second, self.proposed)

    def describe(self) -> str:
        return (f"Closure conflict between {self.first} and {self.second}: "
                f"old relation {self.existing_link} adding new relation {self.proposed_link}")


class RelationIndex:
    """
    Known relation per ordered pair, stored exactly in the direction given.

    Lookups for (A,B) consult key (A,B) first and then (B,A); the reverse
    entry is compared through the inverse relation.
    """

    def __init__(self, report: bool = False):
        self._relations: Dict[PairKey, RelationType] = {}
        self.report = report

    @classmethod
    def from_links(cls, links: Iterable[TLink], report: bool = False) -> "RelationIndex":
        """Seed from a relation set; the first admissible link for a pair wins."""
        index = cls(report=report)
        for link in links:
            index.admit(link)
        return index

    def get(self, first: str, second: str) -> Optional[RelationType]:
        return self._relations.get(PairKey(first, second))

    def put(self, first: str, second: str, relation: RelationType) -> None:
        self._relations[PairKey(first, second)] = relation

    def __contains__(self, key) -> bool:
        return PairKey(*key) in self._relations

    def __len__(self) -> int:
        return len(self._relations)

    def check(self, first: str, second: str, relation: RelationType) -> Optional[Conflict]:
        """
        Compare a proposed link with what is known about the pair.

        Returns None when the link is absent or redundant, else the Conflict.
        Use status() when the absent/redundant distinction matters.
        """
        _, conflict = self._evaluate(first, second, relation)
        return conflict

    def status(self, first: str, second: str, relation: RelationType) -> LinkStatus:
        status, _ = self._evaluate(first, second, relation)
        return status

    def admit(self, link: TLink) -> tuple[LinkStatus, Optional[Conflict]]:
        """Record the link when nothing is known for its pair yet."""
        status, conflict = self._evaluate(link.first, link.second, link.relation)
        if status == LinkStatus.ABSENT:
            self.put(link.first, link.second, link.relation)
        return status, conflict

    def _evaluate(self, first: str, second: str,
                  relation: RelationType) -> tuple[LinkStatus, Optional[Conflict]]:
        key = PairKey(first, second)

        current = self._relations.get(key)
        if current is not None:
            if current == relation or relation in FORWARD_COMPATIBLE.get(current, ()):
                return LinkStatus.REDUNDANT, None
            return LinkStatus.CONFLICTING, self._conflict(Conflict(first, second, current, relation))

        reverse = self._relations.get(key.reversed())
        if reverse is not None:
            if reverse == invert(relation) or frozenset((relation, reverse)) in REVERSE_COMPATIBLE:
                return LinkStatus.REDUNDANT, None
            return LinkStatus.CONFLICTING, self._conflict(
                Conflict(first, second, reverse, relation, reversed=True))

        return LinkStatus.ABSENT, None

    def _conflict(self, conflict: Conflict) -> Conflict:
        if self.report:
            logger.warning(conflict.describe())
        return conflict

