"""
Transitive closure over a set of temporal links.

Pairs of links that share an endpoint are composed through the rule table
until a fixed point is reached. Every derived link passes the admissibility
check before it is added, so contradictions are detected and reported but
never stored.
"""
import random
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence, Tuple

from temporal_closure.consistency import is_consistent
from temporal_closure.logger import get_logger
from temporal_closure.none_links import add_none_links
from temporal_closure.relation_index import Conflict, LinkStatus, RelationIndex
from temporal_closure.relations import MatchCase, RelationType, TextEvent, TLink, make_link
from temporal_closure.rule_table import RuleTable

logger = get_logger(__name__)

# A-A links with these relations only restate identity and seed nothing.
REFLEXIVE_SAFE = frozenset({
    RelationType.SIMULTANEOUS,
    RelationType.INCLUDES,
    RelationType.IDENTITY,
})


@dataclass
class ClosureResult:
    """Outcome of one closure run."""
    new_links: List[TLink] = field(default_factory=list)
    conflicts: List[Conflict] = field(default_factory=list)
    iterations: int = 0

    @property
    def conflict(self) -> bool:
        """True when any conflict was met during the run."""
        return bool(self.conflicts)


def match_links(link1: TLink, link2: TLink) -> Optional[Tuple[MatchCase, str, str]]:
    """
    Find how two links share an endpoint.

    Returns (match case, B, C) where B and C are the endpoints to relate,
    or None when the links share nothing useful.
    """
    if link1.is_reflexive and link1.relation in REFLEXIVE_SAFE:
        return None
    if link2.is_reflexive and link2.relation in REFLEXIVE_SAFE:
        return None

    a1, b1 = link1.first, link1.second
    a2, b2 = link2.first, link2.second
    if a1 == a2 and b1 != b2:
        return MatchCase.AB_AC, b1, b2
    if a1 == b2 and b1 != a2:
        return MatchCase.AB_CA, b1, a2
    if b1 == a2 and a1 != b2:
        return MatchCase.BA_AC, a1, b2
    if b1 == b2 and a1 != a2:
        return MatchCase.BA_CA, a1, a2
    return None


class ClosureEngine:
    """Computes closure and consistency over TLinks with one rule table."""

    def __init__(self, rule_table: RuleTable, report: bool = False):
        self.rule_table = rule_table
        self.report = report

    def compute_closure(self, relations: Sequence[TLink]) -> ClosureResult:
        """Close a copy of the relations; the caller's collection is untouched."""
        return self.close_in_place(list(relations))

    def close_in_place(self, relations: List[TLink],
                       new_links: Optional[List[TLink]] = None) -> ClosureResult:
        """
        Close the relations, appending derived links to the list itself.

        Derived links are also appended to new_links when given. The run
        never stops on a conflict; ClosureResult.conflict tells whether one
        occurred and ClosureResult.conflicts lists them.
        """
        result = ClosureResult(new_links=new_links if new_links is not None else [])
        if self.report:
            logger.info(f"Computing closure ({len(relations)} relations)")

        index = RelationIndex(report=self.report)
        for link in relations:
            _, conflict = index.admit(link)
            if conflict is not None:
                result.conflicts.append(conflict)

        size = 0
        while True:
            old_size = size
            size = len(relations)
            result.iterations += 1

            for i in range(size):
                link1 = relations[i]
                # Pairs among the first old_size links were compared last round.
                start = i + 1 if i >= old_size else old_size
                for j in range(start, size):
                    self._compose(index, relations, result, link1, relations[j])

            logger.debug(f"Closure iteration {result.iterations}: {size} -> {len(relations)} links")
            if len(relations) == size:
                break

        if self.report:
            logger.info(f"Closure added {len(result.new_links)} links in {result.iterations} iterations"
                        f" ({len(result.conflicts)} conflicts)")
        return result

    def _compose(self, index: RelationIndex, relations: List[TLink], result: ClosureResult,
                 link1: TLink, link2: TLink) -> None:
        match = match_links(link1, link2)
        if match is None:
            return
        match_case, b, c = match

        derived = self.rule_table.lookup(link1.relation, link2.relation, match_case)
        if derived is None:
            return

        candidate = make_link(b, c, derived, closed=True)
        status, conflict = index.admit(candidate)
        if status == LinkStatus.ABSENT:
            relations.append(candidate)
            result.new_links.append(candidate)
        elif status == LinkStatus.CONFLICTING:
            result.conflicts.append(conflict)

    def is_consistent(self, relations: Sequence[TLink], link: TLink) -> bool:
        return is_consistent(relations, link, report=self.report)

    def add_none_links(self, links: Sequence[TLink], events: Sequence[TextEvent],
                       id_mapping: Optional[Mapping[str, str]] = None,
                       rng: Optional[random.Random] = None, window: int = 1) -> List[TLink]:
        return add_none_links(links, events, id_mapping=id_mapping, rng=rng, window=window)
