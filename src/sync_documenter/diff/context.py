"""Explicit per-call diagnostic context.

A ``DiffContext`` is created for each connector pass and threaded through
the engine, classifier and section builder.  It carries the connector and
facet names used to tag log lines and collects ``Diagnostic`` records that
end up on the ``ReportModel``.  Nothing here is process-global, so passes
for different connectors can run concurrently without coordination.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum

from pydantic import BaseModel

from sync_documenter.logger import ContextAdapter

logger = logging.getLogger(__name__)


class DiagnosticKind(str, Enum):
    """Categories of non-fatal anomalies found during a run."""

    MALFORMED_ELEMENT = "malformed_element"
    DUPLICATE_KEY = "duplicate_key"
    POLICY_MISMATCH = "policy_mismatch"
    UNREADABLE_ATTRIBUTE = "unreadable_attribute"
    CONNECTOR_FAILED = "connector_failed"


class Diagnostic(BaseModel):
    """One anomaly, reported next to the report rather than inside it.

    Attributes:
        kind: Diagnostic category.
        message: Human-readable description.
        connector: Connector being processed, if any.
        facet: Facet being processed, if any.
        side: ``"pilot"`` or ``"production"`` when the anomaly is one-sided.
    """

    kind: DiagnosticKind
    message: str
    connector: str | None = None
    facet: str | None = None
    side: str | None = None

    model_config = {"frozen": True}

    def __str__(self) -> str:
        where = "/".join(p for p in (self.connector, self.facet) if p)
        prefix = f"[{where}] " if where else ""
        side = f" ({self.side})" if self.side else ""
        return f"{prefix}{self.kind.value}{side}: {self.message}"


@dataclass
class DiffContext:
    """Connector/facet tags plus the diagnostics sink for one pass."""

    connector: str | None = None
    facet: str | None = None
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def for_facet(self, facet: str) -> DiffContext:
        """Return a context for *facet* sharing this context's sink."""
        return replace(self, facet=facet)

    @property
    def log(self) -> ContextAdapter:
        return ContextAdapter(
            logger, {"connector": self.connector, "facet": self.facet}
        )

    def record(
        self, kind: DiagnosticKind, message: str, side: str | None = None
    ) -> Diagnostic:
        """Append a diagnostic and log it at WARNING level."""
        diagnostic = Diagnostic(
            kind=kind,
            message=message,
            connector=self.connector,
            facet=self.facet,
            side=side,
        )
        self.diagnostics.append(diagnostic)
        self.log.warning("%s: %s", kind.value, message)
        return diagnostic
