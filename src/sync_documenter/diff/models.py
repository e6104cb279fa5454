"""Pydantic models for the configuration diff core.

Defines the data contracts shared by the key resolver, classifier, engine
and report builder:

- ``ConfigElement``: read-only node from a pilot or production tree.
- ``ElementKey``: identity used to pair a pilot element with its
  production counterpart.
- ``DiffStatus``: Enum of per-element verdicts.
- ``AttributeChange``: one differing attribute of a modified element.
- ``DiffVerdict``: outcome for one matched or unmatched element pair.

All models are frozen (immutable).
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel


class ConfigElement(BaseModel):
    """A node from either configuration tree.

    Attributes:
        element_type: Type tag, e.g. ``"SyncRule"`` or ``"AttributeMapping"``.
        attributes: Ordered attribute name -> value mapping.  Values are
            strings, lists of strings, or ``None``.
        children: Nested elements in document order.
    """

    element_type: str
    attributes: dict[str, Any] = {}
    children: list[ConfigElement] = []

    model_config = {"frozen": True}

    def get(self, name: str, default: Any = None) -> Any:
        """Return the raw value of attribute *name*."""
        return self.attributes.get(name, default)

    def children_of_type(self, element_type: str) -> list[ConfigElement]:
        """Children whose type tag equals *element_type*, in document order."""
        return [c for c in self.children if c.element_type == element_type]


class ElementKey(BaseModel):
    """Composite identity of a configuration element.

    Attributes:
        element_type: Type tag of the keyed element.
        values: Identity attribute values in policy order.
        scope: Identity values of the parent element for nested diffs.
        positional: True when a component was replaced by the sibling index.
    """

    element_type: str
    values: tuple[str, ...]
    scope: tuple[str, ...] = ()
    positional: bool = False

    model_config = {"frozen": True}

    def __str__(self) -> str:
        parts = [self.element_type, *self.values]
        return "(" + ", ".join(repr(p) for p in parts) + ")"


class DiffStatus(str, Enum):
    """Verdict for one element pair."""

    UNCHANGED = "unchanged"
    ADDED = "added"
    DELETED = "deleted"
    MODIFIED = "modified"


class AttributeChange(BaseModel):
    """A single differing attribute.

    ``None`` on either side means the attribute is absent there.
    """

    name: str
    pilot_value: str | list[str] | None = None
    production_value: str | list[str] | None = None

    model_config = {"frozen": True}

    def as_tuple(self) -> tuple[str, Any, Any]:
        return (self.name, self.pilot_value, self.production_value)


class DiffVerdict(BaseModel):
    """Outcome of comparing one pilot element with its production match.

    Attributes:
        key: Identity key, or ``None`` for malformed elements.
        status: The verdict.
        pilot: Pilot-side snapshot (absent for Added).
        production: Production-side snapshot (absent for Deleted).
        changes: Differing attributes; only populated for Modified.
        children: Verdicts for nested child elements.
        low_confidence: Matched through the positional key fallback.
    """

    key: ElementKey | None = None
    status: DiffStatus
    pilot: ConfigElement | None = None
    production: ConfigElement | None = None
    changes: list[AttributeChange] = []
    children: list[DiffVerdict] = []
    low_confidence: bool = False

    model_config = {"frozen": True}

    @property
    def element(self) -> ConfigElement:
        """The snapshot to display: production for Added, pilot otherwise."""
        if self.status == DiffStatus.ADDED:
            return self.production  # type: ignore[return-value]
        return self.pilot  # type: ignore[return-value]

    @property
    def has_changes(self) -> bool:
        """True if this verdict or any descendant is not Unchanged."""
        if self.status != DiffStatus.UNCHANGED:
            return True
        return any(child.has_changes for child in self.children)
