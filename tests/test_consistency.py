import logging

import pytest

from conftest import link
from temporal_closure.closure import ClosureEngine
from temporal_closure.consistency import find_conflict, is_consistent
from temporal_closure.relations import RelationType


def test_contradicting_link_is_inconsistent():
    relations = [link("A", "B", "BEFORE")]
    assert not is_consistent(relations, link("A", "B", "AFTER"))


def test_conflict_diagnostic_names_entities_and_relations(caplog):
    relations = [link("A", "B", "BEFORE")]

    with caplog.at_level(logging.WARNING, logger="temporal_closure"):
        assert not is_consistent(relations, link("A", "B", "AFTER"), report=True)

    message = caplog.records[-1].message
    for token in ("A", "B", "BEFORE", "AFTER"):
        assert token in message


def test_find_conflict_returns_record():
    conflict = find_conflict([link("A", "B", "BEFORE")], link("A", "B", "AFTER"))

    assert conflict.existing == RelationType.BEFORE
    assert conflict.proposed == RelationType.AFTER
    assert not conflict.reversed


def test_immediately_before_is_compatible_with_before():
    relations = [link("A", "B", "BEFORE")]
    assert is_consistent(relations, link("A", "B", "IMMEDIATELY_BEFORE"))
    assert find_conflict(relations, link("A", "B", "IMMEDIATELY_BEFORE")) is None


def test_unrelated_and_redundant_links_are_consistent():
    relations = [link("A", "B", "BEFORE")]
    assert is_consistent(relations, link("A", "C", "AFTER"))
    assert is_consistent(relations, link("B", "A", "AFTER"))
    assert is_consistent([], link("A", "B", "BEFORE"))


def test_check_does_not_derive_anything():
    # A < B < C makes C < A impossible, but only closure can see that.
    relations = [link("A", "B", "BEFORE"), link("B", "C", "BEFORE")]
    assert is_consistent(relations, link("A", "C", "AFTER"))


def test_closure_finds_what_the_local_check_misses(default_rules):
    relations = [link("A", "B", "BEFORE"), link("B", "C", "BEFORE")]
    candidate = link("A", "C", "AFTER")

    assert is_consistent(relations, candidate)
    result = ClosureEngine(default_rules).compute_closure(relations + [candidate])
    assert result.conflict


@pytest.mark.parametrize("relations, candidate", [
    ([link("A", "B", "BEFORE")], link("A", "B", "AFTER")),
    ([link("B", "A", "BEFORE")], link("A", "B", "BEFORE")),
    ([link("A", "t1", "INCLUDES"), link("t1", "t2", "SIMULTANEOUS")], link("t1", "A", "INCLUDES")),
    ([link("e1", "e2", "IMMEDIATELY_BEFORE")], link("e2", "e1", "BEFORE")),
])
def test_local_inconsistency_implies_closure_conflict(default_rules, empty_rules, relations, candidate):
    assert not is_consistent(relations, candidate)
    for rules in (default_rules, empty_rules):
        assert ClosureEngine(rules).compute_closure(relations + [candidate]).conflict


def test_engine_delegates_consistency(empty_rules):
    engine = ClosureEngine(empty_rules)
    assert not engine.is_consistent([link("A", "B", "BEFORE")], link("A", "B", "AFTER"))
    assert engine.is_consistent([link("A", "B", "BEFORE")], link("A", "B", "IMMEDIATELY_BEFORE"))
