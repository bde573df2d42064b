import logging
from typing import Iterable, Optional

import pytest

from temporal_closure.logger import PACKAGE_LOGGER
from temporal_closure.relations import RelationType, TLink, invert
from temporal_closure.rule_table import RuleTable


ENV_VARS = ["TCLOSURE_RULES", "TCLOSURE_REPORT", "TCLOSURE_NONE_WINDOW", "TCLOSURE_SEED", "LOG_LEVEL"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the caller's environment from leaking into configuration."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture(scope="session")
def default_rules() -> RuleTable:
    return RuleTable.load_default()


@pytest.fixture
def empty_rules() -> RuleTable:
    return RuleTable({})


def link(first: str, second: str, relation: str) -> TLink:
    return TLink(first, second, RelationType[relation])


def relation_between(links: Iterable[TLink], first: str, second: str) -> Optional[RelationType]:
    """Relation first -> second, reading links stored in either direction."""
    for candidate in links:
        if (candidate.first, candidate.second) == (first, second):
            return candidate.relation
        if (candidate.first, candidate.second) == (second, first):
            return invert(candidate.relation)
    return None


def facts(links: Iterable[TLink]) -> set:
    """Direction-normalized (first, second, relation) triples."""
    normalized = set()
    for candidate in links:
        if candidate.first <= candidate.second:
            normalized.add((candidate.first, candidate.second, candidate.relation))
        else:
            normalized.add((candidate.second, candidate.first, invert(candidate.relation)))
    return normalized
