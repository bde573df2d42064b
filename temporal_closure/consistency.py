"""
Single-link consistency test.

Compares a candidate link with the relations already asserted for the same
pair. No rules are applied, so contradictions that only appear after
several transitive steps are left to ClosureEngine.
"""
from typing import Iterable, Optional

from temporal_closure.relation_index import Conflict, RelationIndex
from temporal_closure.relations import TLink


def find_conflict(relations: Iterable[TLink], link: TLink, report: bool = False) -> Optional[Conflict]:
    """The clash between link and the relations, if there is one."""
    index = RelationIndex.from_links(relations)
    index.report = report
    return index.check(link.first, link.second, link.relation)


def is_consistent(relations: Iterable[TLink], link: TLink, report: bool = False) -> bool:
    """False only when link contradicts a relation already known for its pair."""
    return find_conflict(relations, link, report=report) is None
