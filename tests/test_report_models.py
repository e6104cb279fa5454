"""Tests for report models."""

from __future__ import annotations

from sync_documenter.diff.context import Diagnostic, DiagnosticKind
from sync_documenter.diff.models import DiffStatus
from sync_documenter.report.models import (
    ReportModel,
    ReportRow,
    ReportSection,
    TocEntry,
)


def _row(status: DiffStatus, children=None) -> ReportRow:
    return ReportRow(status=status, cells=[], children=children or [])


def _section(heading: str, level: int, rows=None, children=None) -> ReportSection:
    return ReportSection(
        heading=heading,
        level=level,
        anchor_id=f"{heading}-{level}",
        rows=rows or [],
        children=children or [],
    )


class TestReportRow:
    def test_can_hide_unchanged_leaf(self):
        assert _row(DiffStatus.UNCHANGED).can_hide is True

    def test_cannot_hide_changed_child(self):
        row = _row(DiffStatus.UNCHANGED, children=[_row(DiffStatus.ADDED)])
        assert row.can_hide is False

    def test_cannot_hide_modified(self):
        assert _row(DiffStatus.MODIFIED).can_hide is False


class TestReportSection:
    def test_has_changes_from_nested_section(self):
        section = _section(
            "conn",
            0,
            rows=[_row(DiffStatus.UNCHANGED)],
            children=[_section("props", 1, rows=[_row(DiffStatus.DELETED)])],
        )
        assert section.has_changes is True

    def test_empty_section_has_no_changes(self):
        assert _section("empty", 1).has_changes is False


class TestReportModel:
    def _model(self) -> ReportModel:
        return ReportModel(
            title="Comparison",
            sections=[
                _section(
                    "a",
                    0,
                    rows=[_row(DiffStatus.UNCHANGED)],
                    children=[
                        _section("a1", 1, rows=[_row(DiffStatus.ADDED)]),
                        _section("a2", 1, children=[_section("a21", 2)]),
                    ],
                ),
                _section("b", 0, rows=[_row(DiffStatus.DELETED)]),
            ],
            toc=TocEntry(label="", anchor_id="", level=-1),
            diagnostics=[Diagnostic(kind=DiagnosticKind.DUPLICATE_KEY, message="x")],
            generated_at="2026-10-19T00:00:00+00:00",
        )

    def test_iter_sections_pre_order(self):
        headings = [s.heading for s in self._model().iter_sections()]
        assert headings == ["a", "a1", "a2", "a21", "b"]

    def test_summary(self):
        text = self._model().summary()
        assert "Report 'Comparison'" in text
        assert "Connectors:   2" in text
        assert "Added:        1" in text
        assert "Deleted:      1" in text
        assert "Unchanged:    1" in text
        assert "Diagnostics:  1" in text
