"""Report formatting functions.

Provides human-readable and machine-readable output for an assembled
report.  Markup rendering (HTML, Markdown) is left to the caller:

- ``format_report_summary`` -- per-connector change summary.
- ``format_toc`` -- indented table-of-contents outline.
- ``format_diagnostics`` -- one line per diagnostic.
- ``report_to_json`` -- structured dict for a renderer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sync_documenter.diff.models import DiffStatus

if TYPE_CHECKING:
    from .models import ReportModel, ReportRow, ReportSection, TocEntry

# ------------------------------------------------------------------
# Human-readable summary
# ------------------------------------------------------------------


def _totals(section: ReportSection) -> dict[str, int]:
    totals = dict(section.summary)
    for child in section.children:
        for status, count in _totals(child).items():
            totals[status] += count
    return totals


def format_report_summary(report: ReportModel, only_changes: bool = False) -> str:
    """Format a report as a human-readable change summary.

    Args:
        report: The assembled report.
        only_changes: Omit connectors without any change.

    Returns:
        Multi-line formatted string.
    """
    lines: list[str] = []
    lines.append(f"Report: {report.title}")
    lines.append(f"Generated: {report.generated_at}")
    lines.append("")

    shown = 0
    for section in report.sections:
        if only_changes and not section.has_changes:
            continue
        shown += 1
        totals = _totals(section)
        lines.append(f"{section.heading}:")
        lines.append(
            f"  {totals[DiffStatus.ADDED.value]} added, "
            f"{totals[DiffStatus.DELETED.value]} deleted, "
            f"{totals[DiffStatus.MODIFIED.value]} modified, "
            f"{totals[DiffStatus.UNCHANGED.value]} unchanged"
        )
        for child in section.children:
            if child.has_changes:
                lines.append(f"  changed: {child.heading}")
        lines.append("")

    if shown == 0:
        lines.append("No changes found." if only_changes else "No connectors.")
        lines.append("")

    if report.diagnostics:
        lines.append(f"Diagnostics: {len(report.diagnostics)}")
        lines.append("")

    return "\n".join(lines).rstrip()


# ------------------------------------------------------------------
# Table of contents
# ------------------------------------------------------------------


def format_toc(report: ReportModel, indent: str = "  ") -> str:
    """Format the TOC as an indented outline, one ``label (#anchor)`` per line."""
    lines: list[str] = []

    def _walk(entry: TocEntry) -> None:
        for child in entry.children:
            lines.append(f"{indent * child.level}{child.label} (#{child.anchor_id})")
            _walk(child)

    _walk(report.toc)
    return "\n".join(lines)


# ------------------------------------------------------------------
# Diagnostics
# ------------------------------------------------------------------


def format_diagnostics(report: ReportModel) -> str:
    if not report.diagnostics:
        return "No diagnostics."
    return "\n".join(str(d) for d in report.diagnostics)


# ------------------------------------------------------------------
# JSON output
# ------------------------------------------------------------------


def _row_to_json(row: ReportRow) -> dict:
    entry: dict = {
        "status": row.status.value,
        "cells": list(row.cells),
        "can_hide": row.can_hide,
    }
    if row.changes:
        entry["changes"] = [
            {
                "name": c.name,
                "pilot": c.pilot_value,
                "production": c.production_value,
            }
            for c in row.changes
        ]
    if row.low_confidence:
        entry["low_confidence"] = True
    if row.children:
        entry["child_columns"] = list(row.child_columns)
        entry["children"] = [_row_to_json(child) for child in row.children]
    return entry


def _section_to_json(section: ReportSection) -> dict:
    return {
        "heading": section.heading,
        "level": section.level,
        "anchor_id": section.anchor_id,
        "columns": list(section.columns),
        "summary": section.summary,
        "has_changes": section.has_changes,
        "rows": [_row_to_json(row) for row in section.rows],
        "children": [_section_to_json(child) for child in section.children],
    }


def _toc_to_json(entry: TocEntry) -> dict:
    return {
        "label": entry.label,
        "anchor_id": entry.anchor_id,
        "level": entry.level,
        "children": [_toc_to_json(child) for child in entry.children],
    }


def report_to_json(report: ReportModel) -> dict:
    """Convert a report to a structured dict for JSON serialisation.

    Args:
        report: The assembled report.

    Returns:
        Dict with title, timestamp, sections, TOC and diagnostics.
    """
    return {
        "title": report.title,
        "generated_at": report.generated_at,
        "sections": [_section_to_json(s) for s in report.sections],
        "toc": _toc_to_json(report.toc),
        "diagnostics": [
            d.model_dump(mode="json", exclude_none=True)
            for d in report.diagnostics
        ],
    }
