"""Turn facet verdicts into report sections.

``ReportSectionBuilder`` owns the report-wide anchor counter.  Every
section gets ``<slug(heading)>-<n>`` where *n* increases monotonically
across the whole report, so repeated headings ("Run Profiles" under each
connector) stay unique.  Unchanged rows are kept: the report doubles as a
full configuration snapshot, not only a delta.
"""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Sequence
from typing import Union

from sync_documenter.diff.classifier import normalize_value
from sync_documenter.diff.models import DiffStatus, DiffVerdict
from sync_documenter.diff.policy import ColumnSpec, FacetPolicy
from sync_documenter.report.models import STATUS_COLUMN, ReportRow, ReportSection

logger = logging.getLogger(__name__)

MULTI_VALUE_SEPARATOR = "; "

_SLUG_PATTERN = re.compile(r"[^a-z0-9]+")

ColumnsArg = Union[FacetPolicy, Sequence[ColumnSpec], Sequence[str]]


def slugify(heading: str) -> str:
    """Lower-case *heading* and collapse non-alphanumerics to ``-``."""
    slug = _SLUG_PATTERN.sub("-", heading.lower()).strip("-")
    return slug or "section"


def status_label(status: DiffStatus) -> str:
    return status.value.capitalize()


def _column_specs(columns: ColumnsArg) -> list[ColumnSpec]:
    if isinstance(columns, FacetPolicy):
        return list(columns.columns)
    return [
        c if isinstance(c, ColumnSpec) else ColumnSpec(attribute=c, label=c)
        for c in columns
    ]


def format_cell(raw: object) -> str:
    """Render a raw attribute value as one table cell.

    Multi-valued values are joined with ``"; "``; absent or unreadable
    values render as an empty string.
    """
    try:
        value = normalize_value(raw)
    except ValueError:
        return ""
    if value is None:
        return ""
    return MULTI_VALUE_SEPARATOR.join(value)


class ReportSectionBuilder:
    """Builds ``ReportSection`` objects and allocates their anchors.

    One builder is used per report.  ``allocate_anchor()`` is guarded by a
    lock, but the assembler calls it from a single assembly step so that
    anchor numbers follow document order.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counter = 0

    def allocate_anchor(self, heading: str) -> str:
        """Claim the next report-wide anchor id for *heading*."""
        with self._lock:
            self._counter += 1
            return f"{slugify(heading)}-{self._counter}"

    # ------------------------------------------------------------------
    # Rows
    # ------------------------------------------------------------------

    def build_row(
        self,
        verdict: DiffVerdict,
        columns: ColumnsArg,
        child_policy: FacetPolicy | None = None,
    ) -> ReportRow:
        """Convert one verdict (and its nested verdicts) into a row."""
        specs = _column_specs(columns)
        element = verdict.element
        cells = [
            format_cell(element.get(spec.attribute) if element else None)
            for spec in specs
        ]
        cells.append(status_label(verdict.status))

        children: list[ReportRow] = []
        child_columns: list[str] = []
        if child_policy is not None:
            child_columns = [*child_policy.column_labels, STATUS_COLUMN]
            children = [
                self.build_row(child, child_policy, child_policy.child)
                for child in verdict.children
            ]

        return ReportRow(
            status=verdict.status,
            cells=cells,
            changes=verdict.changes,
            low_confidence=verdict.low_confidence,
            children=children,
            child_columns=child_columns,
        )

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def build_section(
        self,
        heading: str,
        verdicts: Sequence[DiffVerdict],
        columns: ColumnsArg,
        level: int = 1,
        anchor_id: str | None = None,
        children: Sequence[ReportSection] = (),
    ) -> ReportSection:
        """Build one section with a row per verdict.

        Args:
            heading: Section title.
            verdicts: Verdicts in engine order.
            columns: A ``FacetPolicy``, column specs, or attribute names.
                Nested rows are built only when a policy with a ``child``
                policy is given.
            level: Nesting level (0 = connector).
            anchor_id: Pre-allocated anchor; a new one is allocated if
                omitted.
            children: Nested sections, already built.

        Returns:
            The section, possibly with zero rows.
        """
        if anchor_id is None:
            anchor_id = self.allocate_anchor(heading)
        child_policy = (
            columns.child if isinstance(columns, FacetPolicy) else None
        )
        specs = _column_specs(columns)
        rows = [self.build_row(v, specs, child_policy) for v in verdicts]
        return ReportSection(
            heading=heading,
            level=level,
            anchor_id=anchor_id,
            columns=[*(s.label for s in specs), STATUS_COLUMN],
            rows=rows,
            children=list(children),
        )

    def build_group_sections(
        self,
        verdicts: Sequence[DiffVerdict],
        policy: FacetPolicy,
        level: int = 2,
    ) -> list[ReportSection]:
        """Split verdicts into one sub-section per ``policy.group_by`` value.

        The fixed ``policy.groups`` come first (emitted even when empty);
        any other values follow in order of first appearance.
        """
        if policy.group_by is None:
            return []

        grouped: dict[str, list[DiffVerdict]] = {g: [] for g in policy.groups}
        for verdict in verdicts:
            element = verdict.element
            value = format_cell(element.get(policy.group_by)) if element else ""
            grouped.setdefault(value, []).append(verdict)

        return [
            self.build_section(
                f"{group or 'Ungrouped'} "
                f"{policy.group_heading or policy.heading}",
                members,
                policy,
                level=level,
            )
            for group, members in grouped.items()
        ]

    def build_facet_section(
        self,
        verdicts: Sequence[DiffVerdict],
        policy: FacetPolicy,
        level: int = 1,
    ) -> ReportSection:
        """Build the section for one facet, with group sub-sections if any.

        A grouped facet keeps its rows in the sub-sections only; the
        facet section itself carries the columns and no rows.
        """
        if policy.group_by is None:
            return self.build_section(
                policy.heading, verdicts, policy, level=level
            )
        anchor_id = self.allocate_anchor(policy.heading)
        groups = self.build_group_sections(verdicts, policy, level=level + 1)
        return self.build_section(
            policy.heading,
            [],
            policy,
            level=level,
            anchor_id=anchor_id,
            children=groups,
        )
