"""Tests for diff core models.

Covers:
- ConfigElement attribute access and child filtering
- ElementKey equality, hashing and display
- DiffVerdict.element and cumulative has_changes
- Frozen (immutable) models
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from sync_documenter.diff.models import (
    AttributeChange,
    ConfigElement,
    DiffStatus,
    DiffVerdict,
    ElementKey,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _el(element_type: str = "SyncRule", **attrs) -> ConfigElement:
    return ConfigElement(element_type=element_type, attributes=attrs)


# ---------------------------------------------------------------------------
# ConfigElement
# ---------------------------------------------------------------------------


class TestConfigElement:
    def test_get_returns_raw_value(self):
        assert _el(name="A").get("name") == "A"

    def test_get_missing_returns_default(self):
        assert _el().get("name") is None
        assert _el().get("name", "x") == "x"

    def test_children_of_type_keeps_document_order(self):
        parent = ConfigElement(
            element_type="SyncRule",
            children=[
                _el("AttributeMapping", source="b"),
                _el("ScopingFilter"),
                _el("AttributeMapping", source="a"),
            ],
        )
        sources = [c.get("source") for c in parent.children_of_type("AttributeMapping")]
        assert sources == ["b", "a"]

    def test_frozen(self):
        element = _el(name="A")
        with pytest.raises(ValidationError):
            element.element_type = "Other"


# ---------------------------------------------------------------------------
# ElementKey
# ---------------------------------------------------------------------------


class TestElementKey:
    def test_equal_keys_hash_equal(self):
        a = ElementKey(element_type="SyncRule", values=("A", "Inbound"))
        b = ElementKey(element_type="SyncRule", values=("A", "Inbound"))
        assert a == b
        assert len({a, b}) == 1

    def test_scope_distinguishes_keys(self):
        a = ElementKey(element_type="AttributeMapping", values=("mail",), scope=("R1",))
        b = ElementKey(element_type="AttributeMapping", values=("mail",), scope=("R2",))
        assert a != b

    def test_str_lists_type_and_values(self):
        key = ElementKey(element_type="SyncRule", values=("A", "Inbound"))
        assert str(key) == "('SyncRule', 'A', 'Inbound')"


# ---------------------------------------------------------------------------
# DiffVerdict
# ---------------------------------------------------------------------------


class TestDiffVerdict:
    def test_element_is_production_for_added(self):
        prod = _el(name="new")
        verdict = DiffVerdict(status=DiffStatus.ADDED, production=prod)
        assert verdict.element is prod

    def test_element_is_pilot_otherwise(self):
        pilot = _el(name="old")
        verdict = DiffVerdict(
            status=DiffStatus.MODIFIED, pilot=pilot, production=_el(name="old2")
        )
        assert verdict.element is pilot

    def test_has_changes_false_for_unchanged_leaf(self):
        verdict = DiffVerdict(status=DiffStatus.UNCHANGED, pilot=_el(), production=_el())
        assert verdict.has_changes is False

    def test_has_changes_propagates_from_children(self):
        child = DiffVerdict(
            status=DiffStatus.MODIFIED,
            pilot=_el("AttributeMapping"),
            production=_el("AttributeMapping"),
            changes=[AttributeChange(name="expression", pilot_value="a", production_value="b")],
        )
        parent = DiffVerdict(
            status=DiffStatus.UNCHANGED,
            pilot=_el(),
            production=_el(),
            children=[child],
        )
        assert parent.status == DiffStatus.UNCHANGED
        assert parent.has_changes is True

    def test_status_values(self):
        assert [s.value for s in DiffStatus] == [
            "unchanged",
            "added",
            "deleted",
            "modified",
        ]


class TestAttributeChange:
    def test_as_tuple(self):
        change = AttributeChange(name="target", pilot_value="X", production_value="Y")
        assert change.as_tuple() == ("target", "X", "Y")
