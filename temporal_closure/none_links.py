"""
NONE link generation.

Completes a sparse link set with explicit NONE relations between nearby
entity pairs that have no relation yet, e.g. as negative examples for a
relation classifier.
"""
import random
from collections import defaultdict
from typing import Dict, List, Mapping, Optional, Sequence, Set

from temporal_closure.logger import get_logger
from temporal_closure.relations import RelationType, TextEvent, TLink, make_link

logger = get_logger(__name__)


def _linked(seen: Dict[str, Set[str]], id1: str, id2: str) -> bool:
    return id2 in seen.get(id1, ()) or id1 in seen.get(id2, ())


def add_none_links(links: Sequence[TLink], events: Sequence[TextEvent],
                   id_mapping: Optional[Mapping[str, str]] = None,
                   rng: Optional[random.Random] = None, window: int = 1) -> List[TLink]:
    """
    Create one NONE link for every unrelated pair of nearby events.

    Args:
        links: Links already present in the document.
        events: Entity mentions in document order.
        id_mapping: Optional translation from mention ids (eiid) to the ids
            used in links. Ids missing from the mapping are used as is.
        rng: Source for the coin flip choosing the link direction.
        window: Largest sentence distance for a pair to be linked.

    Returns:
        The new NONE links; the input links are not modified.
    """
    rng = rng if rng is not None else random.Random()
    mapping = id_mapping or {}

    seen: Dict[str, Set[str]] = defaultdict(set)
    for link in links:
        seen[link.first].add(link.second)

    new_links: List[TLink] = []
    for event1 in events:
        for event2 in events:
            if event1 == event2 or abs(event1.sid - event2.sid) > window:
                continue

            id1 = mapping.get(event1.eiid, event1.eiid)
            id2 = mapping.get(event2.eiid, event2.eiid)
            if id1 == id2 or _linked(seen, id1, id2):
                continue

            first, second = (id2, id1) if rng.random() < 0.5 else (id1, id2)
            seen[first].add(second)
            new_links.append(make_link(first, second, RelationType.NONE))

    logger.debug(f"Generated {len(new_links)} NONE links for {len(events)} events")
    return new_links
