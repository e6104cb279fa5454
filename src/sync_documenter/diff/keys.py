"""Identity-key resolution for configuration elements."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sync_documenter.diff.classifier import normalize_value
from sync_documenter.diff.errors import MalformedElementError
from sync_documenter.diff.models import ConfigElement, ElementKey

if TYPE_CHECKING:
    from sync_documenter.diff.policy import FacetPolicy


def _identity_component(
    element: ConfigElement, attribute: str, policy: FacetPolicy
) -> str | None:
    try:
        value = normalize_value(element.get(attribute))
    except ValueError:
        return None
    if not value:
        return None
    if attribute in policy.case_insensitive:
        value = tuple(v.casefold() for v in value)
    if attribute not in policy.order_sensitive:
        value = tuple(sorted(value))
    text = "|".join(value)
    return text or None


def resolve_key(
    element: ConfigElement,
    policy: FacetPolicy,
    position: int | None = None,
    scope: tuple[str, ...] = (),
) -> ElementKey:
    """Derive the identity key of *element* under *policy*.

    Missing optional identity attributes contribute an empty component.
    Missing required ones are replaced by ``"#<position>"`` and the key is
    flagged ``positional`` -- provided a position is known and the policy
    allows the fallback.

    Args:
        element: The element to key.
        policy: Facet policy naming the identity attributes.
        position: Index of the element within its sibling group.
        scope: Identity values of the parent element.

    Returns:
        The element's ``ElementKey``.

    Raises:
        MalformedElementError: If a required identity attribute is missing
            and no positional fallback is available.
    """
    components: list[str | None] = []
    missing: list[str] = []
    for attribute in policy.identity:
        component = _identity_component(element, attribute, policy)
        if component is None:
            if attribute in policy.optional_identity:
                component = ""
            else:
                missing.append(attribute)
        components.append(component)

    if missing:
        if position is None or not policy.allow_positional_fallback:
            raise MalformedElementError(element.element_type, missing)
        return ElementKey(
            element_type=element.element_type,
            values=tuple(
                f"#{position}" if c is None else c for c in components
            ),
            scope=scope,
            positional=True,
        )

    return ElementKey(
        element_type=element.element_type,
        values=tuple(c for c in components if c is not None),
        scope=scope,
    )
