"""Run-level summary of processed import items."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .result import ImportStatus

if TYPE_CHECKING:
    from collections.abc import Hashable

    from .item import ImportItem


@dataclass(slots=True)
class ImportReport:
    """Counts of item outcomes for one import run."""

    counts: Counter[ImportStatus] = field(default_factory=Counter["ImportStatus"])
    changed: int = 0
    rewritten: int = 0
    failed_rows: list[Hashable] = field(default_factory=list["Hashable"])

    def record(self, item: ImportItem[Hashable, object]) -> None:
        status = item.result.status
        self.counts[status] += 1
        if item.result.data_changed:
            self.changed += 1
        if item.result.row_changed:
            self.rewritten += 1
        if status is ImportStatus.FAILED:
            self.failed_rows.append(item.id)

    def count(self, status: ImportStatus) -> int:
        return self.counts[status]

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    @property
    def inserted(self) -> int:
        return self.counts[ImportStatus.INSERTED]

    @property
    def updated(self) -> int:
        return self.counts[ImportStatus.UPDATED] + self.counts[ImportStatus.FORCE_UPDATED]

    @property
    def deleted(self) -> int:
        return self.counts[ImportStatus.DELETED]

    @property
    def unchanged(self) -> int:
        return self.counts[ImportStatus.UNCHANGED] + self.counts[ImportStatus.SKIPPED]

    @property
    def failed(self) -> int:
        return self.counts[ImportStatus.FAILED]

    @property
    def rejected(self) -> int:
        """Stale updates refused by the version guard; not an error."""
        return self.counts[ImportStatus.REJECTED]

    def summary(self) -> str:
        parts = [f"{status}={self.counts[status]}" for status in ImportStatus if self.counts[status]]
        return f"total={self.total}, changed={self.changed}, rewritten={self.rewritten}" + (
            ", " + ", ".join(parts) if parts else ""
        )
