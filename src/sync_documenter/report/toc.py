"""Table-of-contents assembly mirroring the section tree."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

from sync_documenter.report.models import ReportSection, TocEntry

logger = logging.getLogger(__name__)

ROOT_LEVEL = -1


@dataclass
class _Node:
    label: str
    anchor_id: str
    level: int
    children: list[_Node] = field(default_factory=list)

    def freeze(self) -> TocEntry:
        return TocEntry(
            label=self.label,
            anchor_id=self.anchor_id,
            level=self.level,
            children=[child.freeze() for child in self.children],
        )


class TocAssembler:
    """Accumulates section headings into a TOC tree.

    Keeps a stack of open entries.  A section at level L becomes a child of
    the most recent entry at level L-1; level-0 sections, and sections whose
    parent level was never opened, attach to the synthetic root.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._root = _Node(label="", anchor_id="", level=ROOT_LEVEL)
        self._stack: list[_Node] = [self._root]

    def record(self, section: ReportSection) -> None:
        """Record one section (its children are not visited)."""
        node = _Node(
            label=section.heading,
            anchor_id=section.anchor_id,
            level=section.level,
        )
        with self._lock:
            while len(self._stack) > 1 and self._stack[-1].level >= node.level:
                self._stack.pop()
            parent = self._stack[-1]
            if parent.level != node.level - 1:
                logger.debug(
                    "No open level-%d entry for '%s', attaching to root",
                    node.level - 1,
                    section.heading,
                )
                parent = self._root
                del self._stack[1:]
            parent.children.append(node)
            self._stack.append(node)

    def record_tree(self, section: ReportSection) -> None:
        """Record *section* and all nested sections in document order."""
        self.record(section)
        for child in section.children:
            self.record_tree(child)

    def root(self) -> TocEntry:
        """Return an immutable snapshot of the tree (empty root if unused)."""
        with self._lock:
            return self._root.freeze()
