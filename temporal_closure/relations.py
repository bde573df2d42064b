"""
Relation algebra and link model for temporal closure.

Defines the closed set of qualitative temporal relations between events and
time expressions, their inverses, the four composition patterns ("match
cases") and the TLink record shared by every producer and consumer of the
closure engine.
"""
from dataclasses import dataclass
from enum import IntEnum, StrEnum
from typing import FrozenSet


# ===| ENUMS |===

class RelationType(StrEnum):
    """Qualitative temporal relations (TimeML inventory plus TempEval extras)."""
    BEFORE = "BEFORE"
    AFTER = "AFTER"
    IMMEDIATELY_BEFORE = "IMMEDIATELY_BEFORE"
    IMMEDIATELY_AFTER = "IMMEDIATELY_AFTER"
    INCLUDES = "INCLUDES"
    IS_INCLUDED = "IS_INCLUDED"
    BEGINS = "BEGINS"
    BEGUN_BY = "BEGUN_BY"
    ENDS = "ENDS"
    ENDED_BY = "ENDED_BY"
    SIMULTANEOUS = "SIMULTANEOUS"
    IDENTITY = "IDENTITY"
    DURING = "DURING"
    DURING_INV = "DURING_INV"
    OVERLAP = "OVERLAP"
    VAGUE = "VAGUE"
    NONE = "NONE"

    @classmethod
    def parse(cls, name: str) -> "RelationType":
        """
        Resolve a relation name as written in rule files and annotations.

        Accepts member names in any case, the TimeML short forms IBEFORE and
        IAFTER, and an optional "TLink." prefix. Raises ValueError otherwise.
        """
        token = name.strip()
        if token.startswith("TLink."):
            token = token[len("TLink."):]
        token = token.upper()
        token = _ALIASES.get(token, token)
        try:
            return cls[token]
        except KeyError:
            raise ValueError(f"Unknown temporal relation: {name!r}") from None


class MatchCase(IntEnum):
    """
    How two links share an endpoint. A is the shared entity; closure
    derives a relation between the free endpoints B and C.
    """
    AB_AC = 0  # A-B A-C
    AB_CA = 1  # A-B C-A
    BA_AC = 2  # B-A A-C
    BA_CA = 3  # B-A C-A

    @property
    def marker(self) -> str:
        """Section marker used by the rule file format."""
        return _CASE_MARKERS[self]


class LinkKind(StrEnum):
    """Concrete link kind, selected from the endpoint identifiers."""
    EVENT_EVENT = "event-event"
    EVENT_TIME = "event-time"
    TIME_TIME = "time-time"


_ALIASES = {
    "IBEFORE": "IMMEDIATELY_BEFORE",
    "IAFTER": "IMMEDIATELY_AFTER",
}

_CASE_MARKERS = {
    MatchCase.AB_AC: "A-B A-C",
    MatchCase.AB_CA: "A-B C-A",
    MatchCase.BA_AC: "B-A A-C",
    MatchCase.BA_CA: "B-A C-A",
}

_INVERSES = {
    RelationType.BEFORE: RelationType.AFTER,
    RelationType.AFTER: RelationType.BEFORE,
    RelationType.IMMEDIATELY_BEFORE: RelationType.IMMEDIATELY_AFTER,
    RelationType.IMMEDIATELY_AFTER: RelationType.IMMEDIATELY_BEFORE,
    RelationType.INCLUDES: RelationType.IS_INCLUDED,
    RelationType.IS_INCLUDED: RelationType.INCLUDES,
    RelationType.BEGINS: RelationType.BEGUN_BY,
    RelationType.BEGUN_BY: RelationType.BEGINS,
    RelationType.ENDS: RelationType.ENDED_BY,
    RelationType.ENDED_BY: RelationType.ENDS,
    RelationType.DURING: RelationType.DURING_INV,
    RelationType.DURING_INV: RelationType.DURING,
    RelationType.SIMULTANEOUS: RelationType.SIMULTANEOUS,
    RelationType.IDENTITY: RelationType.IDENTITY,
    RelationType.OVERLAP: RelationType.OVERLAP,
    RelationType.VAGUE: RelationType.VAGUE,
    RelationType.NONE: RelationType.NONE,
}

# Time expression ids are written t1, t2, ...; event ids e1 / ei12.
TIME_ID_PREFIX = "t"


def invert(relation: RelationType) -> RelationType:
    """Relation holding from the second entity to the first."""
    return _INVERSES[relation]


def is_time_id(entity_id: str) -> bool:
    """True when the identifier names a time expression."""
    return entity_id.startswith(TIME_ID_PREFIX)


# ===| DATA CLASSES |===

@dataclass(frozen=True)
class TLink:
    """A directed temporal relation: first <relation> second."""
    first: str
    second: str
    relation: RelationType
    closed: bool = False

    @property
    def kind(self) -> LinkKind:
        times = int(is_time_id(self.first)) + int(is_time_id(self.second))
        if times == 2:
            return LinkKind.TIME_TIME
        if times == 1:
            return LinkKind.EVENT_TIME
        return LinkKind.EVENT_EVENT

    @property
    def pair(self) -> FrozenSet[str]:
        """Unordered endpoint pair."""
        return frozenset((self.first, self.second))

    @property
    def is_reflexive(self) -> bool:
        return self.first == self.second

    def inverted(self) -> "TLink":
        """Same assertion stated from the other endpoint."""
        return TLink(self.second, self.first, invert(self.relation), self.closed)

    def __str__(self) -> str:
        return f"{self.first} {self.relation} {self.second}"


@dataclass(frozen=True)
class TextEvent:
    """An event or time mention together with the sentence it occurs in."""
    eiid: str
    sid: int


def make_link(first: str, second: str, relation: RelationType | str, closed: bool = False) -> TLink:
    """Build a TLink, parsing the relation when given by name."""
    if not isinstance(relation, RelationType):
        relation = RelationType.parse(relation)
    return TLink(first, second, relation, closed)
