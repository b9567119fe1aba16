"""Row import model and reconciliation engine.

One import run walks a tabular source row by row:
1) the source materializes each row into an ``ImportItem``
2) the ``Reconciler`` compares it with the stored entity and applies the
   row's ``ImportInstructions`` through the repository
3) the outcome lands in the item's ``ImportResult``
4) once the row is committed, rows asking for ``sync`` receive the stored
   values back
"""

from __future__ import annotations

from .engine import Decision, Reconciler
from .instructions import ImportInstructions
from .item import ImportItem
from .report import ImportReport
from .result import CHANGED_STATUSES, ImportResult, ImportStatus

__all__ = [
    "CHANGED_STATUSES",
    "Decision",
    "ImportInstructions",
    "ImportItem",
    "ImportReport",
    "ImportResult",
    "ImportStatus",
    "Reconciler",
]
