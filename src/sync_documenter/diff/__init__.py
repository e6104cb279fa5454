"""Configuration diff core.

Pairs elements of a pilot and a production configuration tree and
classifies each pair down to attribute level.

Architecture
------------
Each connector-level category of configuration ("facet") is described by
a static ``FacetPolicy``: which elements it covers, which attributes form
their identity, and how values compare.  The engine keys both sibling
groups with the same policy, so matching survives reordering and partial
presence.

Modules:

- ``models``     -- ``ConfigElement``, ``ElementKey``, ``DiffStatus``,
  ``AttributeChange``, ``DiffVerdict``: core data contracts.
- ``policy``     -- ``FacetPolicy`` registry and connector-type facet tables.
- ``keys``       -- ``resolve_key``: identity keys with positional fallback.
- ``classifier`` -- ``classify``: attribute-level change detection.
- ``engine``     -- ``diff`` / ``DiffEngine``: sibling-group pairing.
- ``context``    -- ``DiffContext`` and ``Diagnostic`` records.
- ``errors``     -- Exception hierarchy.

Usage example
-------------
::

    from sync_documenter.diff import DiffContext, DiffEngine, get_policy

    context = DiffContext(connector="contoso.com")
    engine = DiffEngine(context)
    verdicts = engine.diff(
        pilot_connector.children,
        production_connector.children,
        get_policy("standard_sync_rules"),
    )
    for verdict in verdicts:
        print(verdict.key, verdict.status.value)
    for diagnostic in context.diagnostics:
        print(diagnostic)
"""

from .classifier import classify
from .context import Diagnostic, DiagnosticKind, DiffContext
from .engine import DiffEngine, diff
from .errors import (
    DocumenterError,
    MalformedElementError,
    PolicyMismatchError,
)
from .keys import resolve_key
from .models import (
    AttributeChange,
    ConfigElement,
    DiffStatus,
    DiffVerdict,
    ElementKey,
)
from .policy import (
    CONNECTOR_FACETS,
    CONNECTOR_POLICY,
    FACET_POLICIES,
    ColumnSpec,
    FacetPolicy,
    connector_facets,
    get_policy,
)

__all__ = [
    "AttributeChange",
    "CONNECTOR_FACETS",
    "CONNECTOR_POLICY",
    "ColumnSpec",
    "ConfigElement",
    "Diagnostic",
    "DiagnosticKind",
    "DiffContext",
    "DiffEngine",
    "DiffStatus",
    "DiffVerdict",
    "DocumenterError",
    "ElementKey",
    "FACET_POLICIES",
    "FacetPolicy",
    "MalformedElementError",
    "PolicyMismatchError",
    "classify",
    "connector_facets",
    "diff",
    "get_policy",
    "resolve_key",
]
