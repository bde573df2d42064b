"""
Command line entry point.

Reads TLinks from a JSON file, closes them (or checks a single candidate
link) and writes a JSON report.

    temporal-closure links.json --output closed.json
    temporal-closure links.json --check e1 e2 AFTER
    temporal-closure links.json --none-links events.json --seed 7
"""
import json
import random
import sys
from argparse import ArgumentParser
from pathlib import Path
from typing import Any, Dict, List, Optional

import pendulum

from temporal_closure.closure import ClosureEngine
from temporal_closure.config import load_config
from temporal_closure.consistency import find_conflict
from temporal_closure.logger import configure_logging, get_logger
from temporal_closure.relations import TextEvent, TLink, make_link
from temporal_closure.rule_table import RuleTable

logger = get_logger(__name__)

ISO_UTC_MILLIS = "YYYY-MM-DD[T]HH:mm:ss.SSS[Z]"

EXIT_CONSISTENT = 0
EXIT_CONFLICT = 1
EXIT_ERROR = 2


def read_links(path: Path) -> List[TLink]:
    """Links from a JSON list (or {"links": [...]}) of first/second/relation objects."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("links", [])
    links = []
    for i, item in enumerate(data):
        try:
            relation = item["relation"]
            if not isinstance(relation, str):
                raise ValueError(f"relation must be a name, got {relation!r}")
            links.append(make_link(str(item["first"]), str(item["second"]), relation))
        except KeyError as e:
            raise ValueError(f"{path}: link {i} is missing field {e}") from e
        except TypeError as e:
            raise ValueError(f"{path}: link {i} is not an object: {item!r}") from e
        except ValueError as e:
            raise ValueError(f"{path}: link {i}: {e}") from e
    return links


def read_events(path: Path) -> tuple[List[TextEvent], Dict[str, str]]:
    """Events and optional id mapping from {"events": [...], "id_mapping": {...}} or a bare list."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    mapping: Dict[str, str] = {}
    if isinstance(data, dict):
        mapping = data.get("id_mapping", {})
        data = data.get("events", [])
    events = []
    for i, item in enumerate(data):
        try:
            events.append(TextEvent(str(item["eiid"]), int(item["sid"])))
        except KeyError as e:
            raise ValueError(f"{path}: event {i} is missing field {e}") from e
        except (TypeError, ValueError) as e:
            raise ValueError(f"{path}: event {i} is malformed: {item!r}") from e
    return events, mapping


def link_to_dict(link: TLink) -> Dict[str, Any]:
    return {
        "first": link.first,
        "second": link.second,
        "relation": str(link.relation),
        "kind": str(link.kind),
        "closed": link.closed,
    }


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(description="Compute temporal closure over TLinks and detect conflicts")
    parser.add_argument("links", type=Path, help="JSON file with the input links")
    parser.add_argument("--rules", type=Path, default=None,
                        help="Closure rule file (default: packaged rules or TCLOSURE_RULES)")
    parser.add_argument("--config", type=Path, default=None, help="YAML configuration file")
    parser.add_argument("--check", nargs=3, metavar=("FIRST", "SECOND", "RELATION"),
                        help="Only test whether this link is consistent with the input links")
    parser.add_argument("--none-links", type=Path, default=None,
                        help="JSON file with events; add NONE links between unrelated nearby events")
    parser.add_argument("--seed", type=int, default=None, help="Seed for NONE link direction")
    parser.add_argument("--output", "-o", type=Path, default=None, help="Write the report here instead of stdout")
    parser.add_argument("--report", action="store_true", help="Log every conflict as it is found")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.check and args.none_links:
        parser.error("--check cannot be combined with --none-links")

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as e:
        configure_logging()
        logger.error(f"Invalid configuration: {e}")
        return EXIT_ERROR

    configure_logging("DEBUG" if args.verbose else config.log_level)
    report_conflicts = args.report or config.report
    seed = args.seed if args.seed is not None else config.seed

    try:
        rules = RuleTable.from_path(args.rules) if args.rules else config.load_rules()
        links = read_links(args.links)
        events, id_mapping = read_events(args.none_links) if args.none_links else ([], {})
    except (OSError, ValueError) as e:
        logger.error(f"Cannot load input: {e}")
        return EXIT_ERROR

    engine = ClosureEngine(rules, report=report_conflicts)
    output: Dict[str, Any] = {"input_links": len(links), "rules": len(rules),
                              "rules_sha256": rules.fingerprint}

    if args.check:
        first, second, relation = args.check
        try:
            candidate = make_link(first, second, relation)
        except ValueError as e:
            logger.error(str(e))
            return EXIT_ERROR
        conflict = find_conflict(links, candidate, report=report_conflicts)
        consistent = conflict is None
        output["check"] = {
            "link": link_to_dict(candidate),
            "consistent": consistent,
            "conflict": conflict.describe() if conflict else None,
        }
    else:
        result = engine.compute_closure(links)
        consistent = not result.conflict
        output["new_links"] = [link_to_dict(link) for link in result.new_links]
        output["conflict"] = result.conflict
        output["conflicts"] = [c.describe() for c in result.conflicts]
        output["iterations"] = result.iterations

        if args.none_links:
            none_links = engine.add_none_links(
                links + result.new_links, events, id_mapping=id_mapping,
                rng=random.Random(seed), window=config.none_link_window,
            )
            output["none_links"] = [link_to_dict(link) for link in none_links]

    output["computed_at_utc"] = pendulum.now("UTC").format(ISO_UTC_MILLIS)

    text = json.dumps(output, indent=2)
    if args.output:
        args.output.write_text(text + "\n", encoding="utf-8")
        logger.info(f"Wrote report to {args.output}")
    else:
        sys.stdout.write(text + "\n")

    return EXIT_CONSISTENT if consistent else EXIT_CONFLICT


if __name__ == "__main__":
    sys.exit(main())
