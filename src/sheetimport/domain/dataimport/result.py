"""Outcome taxonomy for one processed import item."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Final


class ImportStatus(StrEnum):
    PENDING = "pending"
    INSERTED = "inserted"
    UPDATED = "updated"
    FORCE_UPDATED = "force_updated"
    DELETED = "deleted"
    # a difference existed but no licensed action applied
    OVERRIDDEN = "overridden"
    SKIPPED = "skipped"
    UNCHANGED = "unchanged"
    # update refused by the version guard
    REJECTED = "rejected"
    FAILED = "failed"


CHANGED_STATUSES: Final[frozenset[ImportStatus]] = frozenset(
    {
        ImportStatus.INSERTED,
        ImportStatus.UPDATED,
        ImportStatus.FORCE_UPDATED,
        ImportStatus.DELETED,
        ImportStatus.OVERRIDDEN,
    }
)


@dataclass(slots=True)
class ImportResult:
    """Mutable outcome attached to an import item."""

    status: ImportStatus = ImportStatus.PENDING
    message: str | None = None
    error: BaseException | None = None
    row_changed: bool = False

    @property
    def data_changed(self) -> bool:
        """Whether the data was changed on either side by the import."""
        return self.status in CHANGED_STATUSES

    def record(self, status: ImportStatus, message: str | None = None) -> None:
        self.status = status
        self.message = message
        self.error = None

    def fail(self, error: BaseException) -> None:
        self.status = ImportStatus.FAILED
        self.message = str(error) or type(error).__name__
        self.error = error
