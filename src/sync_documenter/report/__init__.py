"""Report assembly for pilot/production configuration comparisons.

Turns diff verdicts into a navigable, hierarchically sectioned
``ReportModel`` with a table of contents mirroring the section tree.

Modules:

- ``models``    -- ``ReportRow``, ``ReportSection``, ``TocEntry``,
  ``ReportModel``: data contracts handed to a renderer.
- ``builder``   -- ``ReportSectionBuilder``: rows, sections and anchors.
- ``toc``       -- ``TocAssembler``: TOC tree from recorded sections.
- ``assembler`` -- ``ReportAssembler``: orchestrates a full run.
- ``reporter``  -- Text and JSON output.

Usage example
-------------
::

    from sync_documenter.config import load_from_files
    from sync_documenter.report import ReportAssembler, format_report_summary

    config, _ = load_from_files()
    assembler = ReportAssembler(config)
    report = assembler.build(pilot_connectors, production_connectors)
    print(format_report_summary(report, only_changes=True))
"""

from .assembler import ReportAssembler, build_connector_pass
from .builder import ReportSectionBuilder, slugify
from .models import ReportModel, ReportRow, ReportSection, TocEntry
from .reporter import (
    format_diagnostics,
    format_report_summary,
    format_toc,
    report_to_json,
)
from .toc import TocAssembler

__all__ = [
    "ReportAssembler",
    "ReportModel",
    "ReportRow",
    "ReportSection",
    "ReportSectionBuilder",
    "TocAssembler",
    "TocEntry",
    "build_connector_pass",
    "format_diagnostics",
    "format_report_summary",
    "format_toc",
    "report_to_json",
    "slugify",
]
