"""Exception types for the diff core.

None of these abort a documentation run.  The engine and assembler catch
them at the facet or element boundary and turn them into diagnostics; they
exist so that individual helpers (``resolve_key``, ``get_policy``) can be
called directly by stricter callers.
"""

from __future__ import annotations


class DocumenterError(Exception):
    """Base class for all documenter errors."""


class MalformedElementError(DocumenterError):
    """An element lacks an identity attribute and has no positional fallback.

    Attributes:
        element_type: Type tag of the offending element.
        missing: Names of the identity attributes that were absent.
    """

    def __init__(self, element_type: str, missing: list[str]) -> None:
        self.element_type = element_type
        self.missing = missing
        super().__init__(
            f"{element_type} element is missing identity attribute(s): "
            f"{', '.join(missing)}"
        )


class PolicyMismatchError(DocumenterError, KeyError):
    """No facet policy is registered under the requested name."""

    def __init__(self, facet: str, known: list[str]) -> None:
        self.facet = facet
        self.known = known
        super().__init__(
            f"Unknown facet policy: '{facet}'. Registered facets: {known}"
        )

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return self.args[0]
