"""
Composition rules for temporal closure.

A rule source is line oriented. Four section markers select the match case
that following rules belong to:

    A-B A-C     (case 0)
    A-B C-A     (case 1)
    B-A A-C     (case 2)
    B-A C-A     (case 3)

Inside a section each content line reads ``REL1 REL2 DERIVED``: when the
first link carries REL1 and the second REL2, the free endpoints B and C are
related by DERIVED. Lines containing "/" are comments, lines of five
characters or fewer are ignored. Any other malformed line aborts the load.
"""
import hashlib
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from temporal_closure.logger import get_logger
from temporal_closure.relations import MatchCase, RelationType

logger = get_logger(__name__)

DEFAULT_RULES_PATH = Path(__file__).parent / "data" / "closure_rules.dat"

COMMENT_MARKER = "/"
MIN_RULE_LINE_LENGTH = 6

RuleKey = Tuple[RelationType, RelationType]


class RuleTableError(ValueError):
    """Raised when a rule source cannot be read or parsed."""

    def __init__(self, message: str, source: str, line_number: Optional[int] = None):
        self.source = source
        self.line_number = line_number
        location = source if line_number is None else f"{source}:{line_number}"
        super().__init__(f"{location}: {message}")


class RuleTable:
    """Immutable mapping (relation1, relation2, match case) -> derived relation."""

    def __init__(self, rules: Mapping[MatchCase, Mapping[RuleKey, RelationType]],
                 source: str = "<memory>", fingerprint: Optional[str] = None):
        self._rules: Dict[MatchCase, Mapping[RuleKey, RelationType]] = {
            case: MappingProxyType(dict(rules.get(case, {}))) for case in MatchCase
        }
        self.source = source
        self.fingerprint = fingerprint

    # ===| LOADING |===

    @classmethod
    def from_text(cls, text: str, source: str = "<text>") -> "RuleTable":
        """Parse a rule source held in memory."""
        parsed: Dict[MatchCase, Dict[RuleKey, RelationType]] = {case: {} for case in MatchCase}
        match_case = MatchCase.AB_AC
        added = 0

        for line_number, line in enumerate(text.splitlines(), start=1):
            section = _section_marker(line)
            if section is not None:
                match_case = section
                continue
            if COMMENT_MARKER in line or len(line) < MIN_RULE_LINE_LENGTH:
                continue

            parts = line.split()
            if not parts:
                continue
            if len(parts) != 3:
                raise RuleTableError(
                    f"expected 'REL1 REL2 DERIVED', got {len(parts)} tokens: {line.strip()!r}",
                    source, line_number,
                )
            try:
                first, second, derived = (RelationType.parse(p) for p in parts)
            except ValueError as e:
                raise RuleTableError(str(e), source, line_number) from e

            parsed[match_case][(first, second)] = derived
            added += 1

        digest = hashlib.sha256(text.encode("utf-8")).hexdigest()
        table = cls(parsed, source=source, fingerprint=digest)

        if added == 0:
            logger.warning(f"No closure rules loaded from {source}; closure will derive nothing")
        else:
            logger.info(f"Loaded {added} closure rules from {source} (sha256 {digest[:12]})")
        return table

    @classmethod
    def from_path(cls, path: Path | str) -> "RuleTable":
        """Read and parse a rule file."""
        path = Path(path)
        logger.info(f"Loading closure rules from {path}")
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise RuleTableError(f"rule file is not valid UTF-8 ({e.reason} at byte {e.start})", str(path)) from e
        except OSError as e:
            raise RuleTableError(f"cannot read rule file ({e.strerror or e})", str(path)) from e
        return cls.from_text(text, source=str(path))

    @classmethod
    def load_default(cls) -> "RuleTable":
        """Rules shipped with the package."""
        return cls.from_path(DEFAULT_RULES_PATH)

    # ===| QUERIES |===

    def lookup(self, relation1: RelationType, relation2: RelationType,
               match_case: MatchCase) -> Optional[RelationType]:
        """Derived relation for the pair, or None when no rule exists."""
        return self._rules[MatchCase(match_case)].get((relation1, relation2))

    def rules(self, match_case: MatchCase) -> Mapping[RuleKey, RelationType]:
        return self._rules[MatchCase(match_case)]

    def __len__(self) -> int:
        return sum(len(rules) for rules in self._rules.values())

    def __iter__(self) -> Iterator[Tuple[MatchCase, RelationType, RelationType, RelationType]]:
        for case in MatchCase:
            for (first, second), derived in self._rules[case].items():
                yield case, first, second, derived

    def describe(self) -> str:
        """Render the table back in rule-file form."""
        lines: List[str] = []
        for case in MatchCase:
            lines.append(f"// {case.marker}")
            for (first, second), derived in self._rules[case].items():
                lines.append(f"{first} {second} {derived}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"RuleTable(source={self.source!r}, rules={len(self)})"


def _section_marker(line: str) -> Optional[MatchCase]:
    for case in MatchCase:
        if case.marker in line:
            return case
    return None
