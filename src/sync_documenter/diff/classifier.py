"""Attribute-level change classification for one element pair.

``classify()`` is a pure function from a pair of (possibly absent)
element snapshots to a ``DiffVerdict``:

* only production present -> ``ADDED``
* only pilot present -> ``DELETED``
* both present -> ``MODIFIED`` with every differing attribute, or
  ``UNCHANGED``.

Attribute values are normalized to tuples of strings before comparison.
Multi-valued attributes compare as sets unless the facet policy marks them
order-sensitive; attributes the policy marks case-insensitive compare
case-folded.  Everything else is an ordinal, case-sensitive comparison.
Values that cannot be read are treated as absent.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sync_documenter.diff.context import DiagnosticKind, DiffContext
from sync_documenter.diff.models import (
    AttributeChange,
    ConfigElement,
    DiffStatus,
    DiffVerdict,
)

if TYPE_CHECKING:
    from sync_documenter.diff.policy import FacetPolicy

_SCALARS = (str, int, float, bool)


def normalize_value(value: Any) -> tuple[str, ...] | None:
    """Normalize a raw attribute value to a tuple of strings.

    Returns ``None`` for absent values.

    Raises:
        ValueError: If the value (or one of its items) is not a scalar.
    """
    if value is None:
        return None
    if isinstance(value, _SCALARS):
        return (str(value),)
    if isinstance(value, (list, tuple)):
        items: list[str] = []
        for item in value:
            if item is None:
                continue
            if not isinstance(item, _SCALARS):
                raise ValueError(
                    f"unsupported item type {type(item).__name__}"
                )
            items.append(str(item))
        return tuple(items)
    raise ValueError(f"unsupported value type {type(value).__name__}")


def read_attribute(
    element: ConfigElement,
    name: str,
    context: DiffContext | None = None,
    side: str | None = None,
) -> tuple[str, ...] | None:
    """Return the normalized value of *name*, or ``None`` if absent/unreadable."""
    try:
        return normalize_value(element.get(name))
    except ValueError as exc:
        if context is not None:
            context.record(
                DiagnosticKind.UNREADABLE_ATTRIBUTE,
                f"{element.element_type} attribute '{name}' treated as "
                f"absent: {exc}",
                side=side,
            )
        return None


def display_value(
    raw: Any, normalized: tuple[str, ...] | None
) -> str | list[str] | None:
    """Render a normalized value in the shape of its raw value."""
    if normalized is None:
        return None
    if isinstance(raw, (list, tuple)):
        return list(normalized)
    return normalized[0]


def values_equal(
    name: str,
    pilot_value: tuple[str, ...] | None,
    production_value: tuple[str, ...] | None,
    policy: FacetPolicy | None = None,
) -> bool:
    """Compare two normalized values under the policy's rules for *name*."""
    if pilot_value is None or production_value is None:
        return pilot_value is None and production_value is None
    if policy is not None and name in policy.case_insensitive:
        pilot_value = tuple(v.casefold() for v in pilot_value)
        production_value = tuple(v.casefold() for v in production_value)
    if policy is not None and name in policy.order_sensitive:
        return pilot_value == production_value
    return set(pilot_value) == set(production_value)


def classify(
    pilot: ConfigElement | None,
    production: ConfigElement | None,
    policy: FacetPolicy | None = None,
    context: DiffContext | None = None,
) -> DiffVerdict:
    """Classify a pilot/production element pair.

    Args:
        pilot: Pilot-side snapshot, or ``None`` if absent.
        production: Production-side snapshot, or ``None`` if absent.
        policy: Facet policy supplying comparison switches.
        context: Diagnostic context for unreadable attributes.

    Returns:
        A ``DiffVerdict`` without key or children; the engine fills those.

    Raises:
        ValueError: If both sides are absent.
    """
    if pilot is None and production is None:
        raise ValueError("classify() needs at least one element")
    if pilot is None:
        return DiffVerdict(status=DiffStatus.ADDED, production=production)
    if production is None:
        return DiffVerdict(status=DiffStatus.DELETED, pilot=pilot)

    ignored = policy.ignored if policy is not None else frozenset()
    names = list(pilot.attributes)
    names.extend(n for n in production.attributes if n not in pilot.attributes)

    changes: list[AttributeChange] = []
    for name in names:
        if name in ignored:
            continue
        pilot_value = read_attribute(pilot, name, context, "pilot")
        production_value = read_attribute(
            production, name, context, "production"
        )
        if values_equal(name, pilot_value, production_value, policy):
            continue
        changes.append(
            AttributeChange(
                name=name,
                pilot_value=display_value(pilot.get(name), pilot_value),
                production_value=display_value(
                    production.get(name), production_value
                ),
            )
        )

    if changes:
        return DiffVerdict(
            status=DiffStatus.MODIFIED,
            pilot=pilot,
            production=production,
            changes=changes,
        )
    return DiffVerdict(
        status=DiffStatus.UNCHANGED, pilot=pilot, production=production
    )
