"""Diff engine that pairs and classifies sibling elements of one facet.

``diff()`` walks a pilot sibling group and a production sibling group:

1. Selects the elements the facet policy covers and keys each one with
   ``resolve_key()``.  The first occurrence of a key wins; later
   duplicates are kept as extras.
2. Emits one verdict per pilot element in pilot document order --
   ``UNCHANGED``/``MODIFIED`` when the key has a production match,
   ``DELETED`` otherwise.
3. Emits ``ADDED`` for every remaining production element in production
   document order.

Matched elements whose policy has a ``child`` policy are recursed into,
with child keys scoped by the parent's identity.  A parent's status
reflects its own attributes only: an ``UNCHANGED`` parent may hold
``MODIFIED`` children (``DiffVerdict.has_changes`` covers the subtree).
Malformed or duplicate elements never stop the pass: they are reported
as one-sided verdicts and recorded as diagnostics on the ``DiffContext``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from sync_documenter.diff.classifier import classify
from sync_documenter.diff.context import DiagnosticKind, DiffContext
from sync_documenter.diff.errors import MalformedElementError
from sync_documenter.diff.keys import resolve_key
from sync_documenter.diff.models import (
    ConfigElement,
    DiffStatus,
    DiffVerdict,
    ElementKey,
)
from sync_documenter.diff.policy import FacetPolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Entry:
    """A selected sibling with its key (``None`` when malformed)."""

    element: ConfigElement
    key: ElementKey | None
    primary: bool


def _keyed(
    elements: Sequence[ConfigElement],
    policy: FacetPolicy,
    scope: tuple[str, ...],
) -> Iterator[tuple[ConfigElement, ElementKey | None, Exception | None]]:
    """Yield each element *policy* selects with its key or keying error.

    The positional fallback counts only siblings that lack identity, so
    moving keyed siblings never changes a positional key.
    """
    keyless = 0
    for element in elements:
        if not policy.selects(element):
            continue
        try:
            key = resolve_key(element, policy, scope=scope)
        except MalformedElementError:
            try:
                key = resolve_key(element, policy, keyless, scope)
            except MalformedElementError as exc:
                yield element, None, exc
                continue
            keyless += 1
        yield element, key, None


def _index(
    elements: Sequence[ConfigElement],
    policy: FacetPolicy,
    context: DiffContext,
    side: str,
    scope: tuple[str, ...],
) -> tuple[list[_Entry], dict[ElementKey, ConfigElement]]:
    """Key the selected elements of one side, first occurrence wins."""
    entries: list[_Entry] = []
    primary: dict[ElementKey, ConfigElement] = {}

    for element, key, error in _keyed(elements, policy, scope):
        if key is None:
            context.record(
                DiagnosticKind.MALFORMED_ELEMENT,
                f"{error}; reported without a counterpart",
                side=side,
            )
            entries.append(_Entry(element, None, False))
            continue

        if key in primary:
            context.record(
                DiagnosticKind.DUPLICATE_KEY,
                f"Duplicate key {key}; first occurrence is matched, "
                "this one is reported without a counterpart",
                side=side,
            )
            entries.append(_Entry(element, key, False))
            continue

        primary[key] = element
        entries.append(_Entry(element, key, True))

    return entries, primary


def _singleton(
    element: ConfigElement,
    key: ElementKey | None,
    status: DiffStatus,
    policy: FacetPolicy,
) -> DiffVerdict:
    """Verdict for an element that exists on one side only.

    The whole subtree shares the element's status.
    """
    children: list[DiffVerdict] = []
    if policy.child is not None:
        scope = key.values if key is not None else ()
        children = [
            _singleton(child, child_key, status, policy.child)
            for child, child_key, _ in _keyed(
                element.children, policy.child, scope
            )
        ]

    side = {"pilot": element} if status == DiffStatus.DELETED else {
        "production": element
    }
    return DiffVerdict(key=key, status=status, children=children, **side)


def _compare(
    pilot: ConfigElement,
    production: ConfigElement,
    key: ElementKey,
    policy: FacetPolicy,
    context: DiffContext,
) -> DiffVerdict:
    verdict = classify(pilot, production, policy, context)
    children: list[DiffVerdict] = []
    if policy.child is not None:
        children = diff(
            pilot.children,
            production.children,
            policy.child,
            context,
            scope=key.values,
        )
    return verdict.model_copy(
        update={
            "key": key,
            "children": children,
            "low_confidence": key.positional,
        }
    )


def diff(
    pilot_children: Sequence[ConfigElement],
    production_children: Sequence[ConfigElement],
    policy: FacetPolicy,
    context: DiffContext | None = None,
    scope: tuple[str, ...] = (),
) -> list[DiffVerdict]:
    """Pair and classify two sibling groups under *policy*.

    Args:
        pilot_children: Pilot-side siblings, in document order.
        production_children: Production-side siblings, in document order.
        policy: Facet policy used for selection, keys and comparison.
        context: Diagnostic context; a throwaway one is used if omitted.
        scope: Identity values of the parent element for nested diffs.

    Returns:
        Verdicts: pilot order first, then production-only elements.
    """
    if context is None:
        context = DiffContext()

    pilot_entries, pilot_primary = _index(
        pilot_children, policy, context, "pilot", scope
    )
    production_entries, production_primary = _index(
        production_children, policy, context, "production", scope
    )

    verdicts: list[DiffVerdict] = []

    for entry in pilot_entries:
        if (
            entry.primary
            and entry.key is not None
            and entry.key in production_primary
        ):
            verdicts.append(
                _compare(
                    entry.element,
                    production_primary[entry.key],
                    entry.key,
                    policy,
                    context,
                )
            )
        else:
            verdicts.append(
                _singleton(entry.element, entry.key, DiffStatus.DELETED, policy)
            )

    for entry in production_entries:
        if (
            entry.primary
            and entry.key is not None
            and entry.key in pilot_primary
        ):
            continue
        verdicts.append(
            _singleton(entry.element, entry.key, DiffStatus.ADDED, policy)
        )

    if not scope:
        counts = {s.value: 0 for s in DiffStatus}
        for verdict in verdicts:
            counts[verdict.status.value] += 1
        context.log.debug(
            "%s: %d verdicts %s", policy.name, len(verdicts), counts
        )

    return verdicts


class DiffEngine:
    """Facade binding a ``DiffContext`` to repeated ``diff()`` calls.

    Args:
        context: Diagnostic context shared by every call on this engine.
    """

    def __init__(self, context: DiffContext | None = None) -> None:
        self.context = context or DiffContext()

    def diff(
        self,
        pilot_children: Sequence[ConfigElement],
        production_children: Sequence[ConfigElement],
        policy: FacetPolicy,
    ) -> list[DiffVerdict]:
        """Diff two sibling groups; see module-level ``diff()``."""
        return diff(
            pilot_children,
            production_children,
            policy,
            self.context.for_facet(policy.name),
        )
