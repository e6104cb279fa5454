"""Pydantic models for the assembled comparison report.

Defines the data contracts handed to a renderer:

- ``ReportRow``: One displayed element with its status cell.
- ``ReportSection``: Heading, anchor, column headers, rows and
  nested sub-sections.
- ``TocEntry``: Table-of-contents node mirroring the section tree.
- ``ReportModel``: Complete report for one run.

All models are frozen (immutable).
"""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import BaseModel

from sync_documenter.diff.context import Diagnostic
from sync_documenter.diff.models import AttributeChange, DiffStatus

STATUS_COLUMN = "Status"


class ReportRow(BaseModel):
    """One row of a report table.

    Attributes:
        status: Verdict of the element shown on this row.
        cells: Display values, one per section column (status last).
        changes: Attribute-level changes for Modified rows.
        low_confidence: The element was paired by sibling position.
        children: Rows for nested elements, e.g. attribute mappings.
        child_columns: Column headers for ``children``.
    """

    status: DiffStatus
    cells: list[str]
    changes: list[AttributeChange] = []
    low_confidence: bool = False
    children: list[ReportRow] = []
    child_columns: list[str] = []

    model_config = {"frozen": True}

    @property
    def can_hide(self) -> bool:
        """True if this row and all nested rows are Unchanged."""
        if self.status != DiffStatus.UNCHANGED:
            return False
        return all(child.can_hide for child in self.children)


class ReportSection(BaseModel):
    """One section of the report body.

    Attributes:
        heading: Section title.
        level: Nesting depth; 0 is a connector section.
        anchor_id: Unique in-document anchor.
        columns: Column headers, status column last.
        rows: Table rows in verdict order.
        children: Nested sections.
    """

    heading: str
    level: int
    anchor_id: str
    columns: list[str] = []
    rows: list[ReportRow] = []
    children: list[ReportSection] = []

    model_config = {"frozen": True}

    @property
    def summary(self) -> dict[str, int]:
        """Row counts by status value (own rows only)."""
        counts = {status.value: 0 for status in DiffStatus}
        for row in self.rows:
            counts[row.status.value] += 1
        return counts

    @property
    def has_changes(self) -> bool:
        """True if any row or nested section shows a change."""
        if any(not row.can_hide for row in self.rows):
            return True
        return any(child.has_changes for child in self.children)


class TocEntry(BaseModel):
    """Table-of-contents node.

    The root entry has an empty label and anchor and level ``-1``.
    """

    label: str
    anchor_id: str
    level: int
    children: list[TocEntry] = []

    model_config = {"frozen": True}


class ReportModel(BaseModel):
    """Complete comparison report.

    Attributes:
        title: Report title.
        sections: Connector sections in connector order.
        toc: Root of the table of contents.
        diagnostics: Non-fatal anomalies found during the run.
        generated_at: ISO 8601 timestamp.
    """

    title: str
    sections: list[ReportSection] = []
    toc: TocEntry
    diagnostics: list[Diagnostic] = []
    generated_at: str

    model_config = {"frozen": True}

    def iter_sections(self) -> Iterator[ReportSection]:
        """Yield every section in pre-order (document order)."""
        stack = list(reversed(self.sections))
        while stack:
            section = stack.pop()
            yield section
            stack.extend(reversed(section.children))

    def summary(self) -> str:
        """Format a human-readable summary of the report.

        Returns:
            Multi-line summary string with row counts by status.
        """
        totals = {status.value: 0 for status in DiffStatus}
        for section in self.iter_sections():
            for status, count in section.summary.items():
                totals[status] += count
        lines = [
            f"Report '{self.title}'",
            f"  Connectors:   {len(self.sections)}",
            f"  Added:        {totals[DiffStatus.ADDED.value]}",
            f"  Deleted:      {totals[DiffStatus.DELETED.value]}",
            f"  Modified:     {totals[DiffStatus.MODIFIED.value]}",
            f"  Unchanged:    {totals[DiffStatus.UNCHANGED.value]}",
            f"  Diagnostics:  {len(self.diagnostics)}",
        ]
        return "\n".join(lines)
