"""Tests for the change classifier.

Covers:
- Added / Deleted / Unchanged / Modified verdicts
- Attribute union ordering of changes
- Set vs sequence comparison of multi-valued attributes
- Case-insensitive attributes and ignored attributes
- Unreadable values treated as absent, with a diagnostic
"""

from __future__ import annotations

import pytest

from sync_documenter.diff.classifier import (
    classify,
    display_value,
    normalize_value,
    values_equal,
)
from sync_documenter.diff.context import DiagnosticKind, DiffContext
from sync_documenter.diff.models import ConfigElement, DiffStatus
from sync_documenter.diff.policy import FacetPolicy, get_policy

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _el(element_type: str = "SyncRule", **attrs) -> ConfigElement:
    return ConfigElement(element_type=element_type, attributes=attrs)


def _policy(**kwargs) -> FacetPolicy:
    defaults = {
        "name": "test",
        "heading": "Test",
        "element_type": "SyncRule",
        "identity": ("name",),
    }
    defaults.update(kwargs)
    return FacetPolicy(**defaults)


# ---------------------------------------------------------------------------
# normalize_value / display_value
# ---------------------------------------------------------------------------


class TestNormalizeValue:
    def test_none_is_absent(self):
        assert normalize_value(None) is None

    def test_scalar_becomes_one_tuple(self):
        assert normalize_value("x") == ("x",)
        assert normalize_value(3) == ("3",)

    def test_list_keeps_order_and_skips_none(self):
        assert normalize_value(["b", None, "a"]) == ("b", "a")

    def test_unsupported_type_raises(self):
        with pytest.raises(ValueError):
            normalize_value({"a": 1})

    def test_unsupported_item_raises(self):
        with pytest.raises(ValueError):
            normalize_value(["a", {"b": 1}])


class TestDisplayValue:
    def test_scalar_shape(self):
        assert display_value("x", ("x",)) == "x"

    def test_list_shape(self):
        assert display_value(["a", "b"], ("a", "b")) == ["a", "b"]

    def test_absent(self):
        assert display_value(None, None) is None


class TestValuesEqual:
    def test_multi_valued_compare_as_sets(self):
        assert values_equal("members", ("a", "b"), ("b", "a"))

    def test_order_sensitive_compare_as_sequences(self):
        policy = _policy(order_sensitive=frozenset({"attributes"}))
        assert not values_equal("attributes", ("a", "b"), ("b", "a"), policy)

    def test_case_sensitive_by_default(self):
        assert not values_equal("target", ("Mail",), ("mail",))

    def test_case_insensitive_when_configured(self):
        policy = _policy(case_insensitive=frozenset({"target"}))
        assert values_equal("target", ("Mail",), ("mail",), policy)

    def test_absent_vs_present(self):
        assert not values_equal("target", None, ("x",))
        assert values_equal("target", None, None)


# ---------------------------------------------------------------------------
# classify
# ---------------------------------------------------------------------------


class TestClassify:
    def test_only_production_is_added(self):
        verdict = classify(None, _el(name="A"))
        assert verdict.status == DiffStatus.ADDED
        assert verdict.changes == []

    def test_only_pilot_is_deleted(self):
        verdict = classify(_el(name="A"), None)
        assert verdict.status == DiffStatus.DELETED
        assert verdict.changes == []

    def test_both_absent_raises(self):
        with pytest.raises(ValueError):
            classify(None, None)

    def test_identical_is_unchanged(self):
        verdict = classify(_el(name="A", target="X"), _el(name="A", target="X"))
        assert verdict.status == DiffStatus.UNCHANGED
        assert verdict.changes == []

    def test_modified_target(self):
        pilot = _el(name="A", direction="Inbound", precedence="1", target="X")
        production = _el(name="A", direction="Inbound", precedence="1", target="Y")
        verdict = classify(pilot, production)
        assert verdict.status == DiffStatus.MODIFIED
        assert [c.as_tuple() for c in verdict.changes] == [("target", "X", "Y")]

    def test_changes_follow_pilot_then_production_order(self):
        pilot = _el(b="1", a="1", only_pilot="p")
        production = _el(a="2", b="2", only_prod="q")
        verdict = classify(pilot, production)
        assert [c.name for c in verdict.changes] == ["b", "a", "only_pilot", "only_prod"]

    def test_absent_attribute_reported_as_none(self):
        verdict = classify(_el(name="A"), _el(name="A", scope="all"))
        assert verdict.changes[0].as_tuple() == ("scope", None, "all")

    def test_multi_valued_reorder_is_unchanged(self):
        verdict = classify(_el(values=["a", "b"]), _el(values=["b", "a"]))
        assert verdict.status == DiffStatus.UNCHANGED

    def test_multi_valued_change_keeps_list_shape(self):
        verdict = classify(_el(values=["a"]), _el(values=["a", "b"]))
        assert verdict.changes[0].as_tuple() == ("values", ["a"], ["a", "b"])

    def test_ignored_attribute_is_skipped(self):
        policy = get_policy("standard_sync_rules")
        pilot = _el(name="A", direction="Inbound", id="guid-1")
        production = _el(name="A", direction="Inbound", id="guid-2")
        assert classify(pilot, production, policy).status == DiffStatus.UNCHANGED

    def test_unreadable_value_treated_as_absent(self):
        context = DiffContext(connector="contoso", facet="properties")
        verdict = classify(
            _el(name="A", blob={"x": 1}),
            _el(name="A"),
            context=context,
        )
        assert verdict.status == DiffStatus.UNCHANGED
        assert len(context.diagnostics) == 1
        diagnostic = context.diagnostics[0]
        assert diagnostic.kind == DiagnosticKind.UNREADABLE_ATTRIBUTE
        assert diagnostic.side == "pilot"
