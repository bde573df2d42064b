"""
Temporal closure and consistency checking for TimeML-style TLinks.
"""
from temporal_closure.closure import ClosureEngine, ClosureResult, match_links
from temporal_closure.consistency import find_conflict, is_consistent
from temporal_closure.none_links import add_none_links
from temporal_closure.relation_index import Conflict, LinkStatus, PairKey, RelationIndex
from temporal_closure.relations import (
    LinkKind,
    MatchCase,
    RelationType,
    TextEvent,
    TLink,
    invert,
    make_link,
)
from temporal_closure.rule_table import RuleTable, RuleTableError

__all__ = [
    "ClosureEngine",
    "ClosureResult",
    "Conflict",
    "LinkKind",
    "LinkStatus",
    "MatchCase",
    "PairKey",
    "RelationIndex",
    "RelationType",
    "RuleTable",
    "RuleTableError",
    "TLink",
    "TextEvent",
    "add_none_links",
    "find_conflict",
    "invert",
    "is_consistent",
    "make_link",
    "match_links",
]
