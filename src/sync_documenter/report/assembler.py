"""Report assembler that orchestrates a full documentation run.

The ``ReportAssembler`` ties together the diff engine, facet policies,
section builder and TOC assembler.  It:

1. Pairs pilot and production connectors by name.
2. Looks up the facet list for each connector's category.
3. Diffs every facet of every connector (the "connector pass").
4. Builds sections, allocates anchors and records the TOC, serially and
   in connector order.
5. Returns an immutable ``ReportModel``.

Connector passes are pure and can run concurrently (``build_async``);
step 4 always runs on one thread so anchor numbers and TOC nesting follow
document order.  Error handling is per-connector: one failing connector
is reported as a diagnostic and does not abort the run.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sync_documenter.config import Config
from sync_documenter.core.async_utils import (
    gather_limited,
    make_semaphore,
    run_sync_limited,
)
from sync_documenter.diff.context import Diagnostic, DiagnosticKind, DiffContext
from sync_documenter.diff.engine import diff
from sync_documenter.diff.errors import PolicyMismatchError
from sync_documenter.diff.models import ConfigElement, DiffVerdict
from sync_documenter.diff.policy import (
    CONNECTOR_POLICY,
    FacetPolicy,
    connector_facets,
    get_policy,
)
from sync_documenter.report.builder import ReportSectionBuilder
from sync_documenter.report.models import ReportModel, ReportSection
from sync_documenter.report.toc import TocAssembler

logger = logging.getLogger(__name__)

UNNAMED_CONNECTOR = "(unnamed)"


@dataclass
class FacetResult:
    """Verdicts for one facet of one connector (``policy`` None if unknown)."""

    facet: str
    policy: FacetPolicy | None
    verdicts: list[DiffVerdict] = field(default_factory=list)


@dataclass
class ConnectorPass:
    """Output of diffing all facets of one connector; holds no anchors."""

    name: str
    verdict: DiffVerdict
    facets: list[FacetResult] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def heading(self) -> str:
        return f"{self.name} Connector Configuration"


def _children(element: ConfigElement | None) -> list[ConfigElement]:
    return list(element.children) if element is not None else []


def build_connector_pass(
    verdict: DiffVerdict,
    facet_overrides: dict[str, list[str]] | None = None,
    registry: dict[str, FacetPolicy] | None = None,
) -> ConnectorPass:
    """Diff every facet of one paired connector.

    Added and Deleted connectors are diffed against an empty sibling group,
    so all of their facet rows share the connector's status.

    Args:
        verdict: Connector-level verdict from the connector diff.
        facet_overrides: Per-category facet lists from configuration.
        registry: Alternative facet policy registry.

    Returns:
        The connector's facet verdicts and diagnostics.
    """
    element = verdict.element
    name = str(element.get("name") or UNNAMED_CONNECTOR)
    context = DiffContext(connector=name)
    facets = connector_facets(element.get("category"), facet_overrides)
    context.log.debug("Documenting %d facets", len(facets))

    result = ConnectorPass(
        name=name, verdict=verdict, diagnostics=context.diagnostics
    )
    for facet in facets:
        facet_context = context.for_facet(facet)
        try:
            policy = get_policy(facet, registry)
        except PolicyMismatchError as exc:
            facet_context.record(DiagnosticKind.POLICY_MISMATCH, str(exc))
            result.facets.append(FacetResult(facet=facet, policy=None))
            continue
        verdicts = diff(
            _children(verdict.pilot),
            _children(verdict.production),
            policy,
            facet_context,
        )
        result.facets.append(
            FacetResult(facet=facet, policy=policy, verdicts=verdicts)
        )
    return result


class ReportAssembler:
    """Build a ``ReportModel`` from two connector forests.

    Args:
        config: Runtime configuration; defaults are used if omitted.
        registry: Alternative facet policy registry.
    """

    def __init__(
        self,
        config: Config | None = None,
        registry: dict[str, FacetPolicy] | None = None,
    ) -> None:
        self.config = config or Config()
        self.registry = registry

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def build(
        self,
        pilot_connectors: Sequence[ConfigElement],
        production_connectors: Sequence[ConfigElement],
    ) -> ReportModel:
        """Assemble the report, running connector passes one by one."""
        context, verdicts = self._pair_connectors(
            pilot_connectors, production_connectors
        )
        passes = [self._safe_pass(v) for v in verdicts]
        return self._assemble(context, passes)

    async def build_async(
        self,
        pilot_connectors: Sequence[ConfigElement],
        production_connectors: Sequence[ConfigElement],
    ) -> ReportModel:
        """Assemble the report, running connector passes in worker threads.

        At most ``config.max_parallel_connectors`` passes run at once.
        The result is identical to ``build()``.
        """
        context, verdicts = self._pair_connectors(
            pilot_connectors, production_connectors
        )
        semaphore = make_semaphore(self.config.max_parallel_connectors)
        passes = await gather_limited(
            [run_sync_limited(semaphore, self._safe_pass, v) for v in verdicts]
        )
        return self._assemble(context, passes)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _pair_connectors(
        self,
        pilot_connectors: Sequence[ConfigElement],
        production_connectors: Sequence[ConfigElement],
    ) -> tuple[DiffContext, list[DiffVerdict]]:
        context = DiffContext(facet=CONNECTOR_POLICY.name)
        verdicts = diff(
            pilot_connectors, production_connectors, CONNECTOR_POLICY, context
        )
        logger.info(
            "Documenting %d connectors (%d pilot, %d production)",
            len(verdicts),
            len(pilot_connectors),
            len(production_connectors),
        )
        return context, verdicts

    def _safe_pass(self, verdict: DiffVerdict) -> ConnectorPass:
        try:
            return build_connector_pass(
                verdict, self.config.connector_facets, self.registry
            )
        except Exception as exc:
            name = str(verdict.element.get("name") or UNNAMED_CONNECTOR)
            logger.error("Error documenting connector %s: %s", name, exc)
            context = DiffContext(connector=name)
            context.record(
                DiagnosticKind.CONNECTOR_FAILED,
                f"{type(exc).__name__}: {exc}",
            )
            return ConnectorPass(
                name=name, verdict=verdict, diagnostics=context.diagnostics
            )

    def _build_connector_section(
        self, builder: ReportSectionBuilder, result: ConnectorPass
    ) -> ReportSection:
        anchor_id = builder.allocate_anchor(result.heading)
        facet_sections = []
        for facet in result.facets:
            if facet.policy is None:
                facet_sections.append(builder.build_section(facet.facet, [], []))
            else:
                facet_sections.append(
                    builder.build_facet_section(facet.verdicts, facet.policy)
                )
        return builder.build_section(
            result.heading,
            [result.verdict],
            CONNECTOR_POLICY,
            level=0,
            anchor_id=anchor_id,
            children=facet_sections,
        )

    def _assemble(
        self, context: DiffContext, passes: Sequence[ConnectorPass]
    ) -> ReportModel:
        builder = ReportSectionBuilder()
        toc = TocAssembler()
        sections: list[ReportSection] = []
        diagnostics = list(context.diagnostics)

        for result in passes:
            section = self._build_connector_section(builder, result)
            toc.record_tree(section)
            sections.append(section)
            diagnostics.extend(result.diagnostics)

        report = ReportModel(
            title=self.config.report_title,
            sections=sections,
            toc=toc.root(),
            diagnostics=diagnostics,
            generated_at=datetime.now(timezone.utc).isoformat(),
        )
        logger.info(
            "Report assembled: %d connectors, %d diagnostics",
            len(sections),
            len(diagnostics),
        )
        return report
