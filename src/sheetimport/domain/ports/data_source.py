"""Port for tabular record sources."""

from __future__ import annotations

from collections.abc import Hashable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from sheetimport.domain.dataimport.item import ImportItem


@runtime_checkable
class DataSource[TKey: Hashable, TEntity](Protocol):
    """Forward-only cursor over rows, each materialized as one import item.

    Iteration is lazy and finite and cannot be restarted without reopening.
    Reading or writing while closed raises ``DocumentClosedError``.
    """

    def open(self) -> None: ...

    def close(self) -> None:
        """Flush pending row writes (if writable) and release the document."""
        ...

    def current(self) -> ImportItem[TKey, TEntity]: ...

    def __iter__(self) -> DataSource[TKey, TEntity]: ...

    def __next__(self) -> ImportItem[TKey, TEntity]: ...

    def sync(self, item: ImportItem[TKey, TEntity]) -> ImportItem[TKey, TEntity]:
        """Write the item back into its row and return the refreshed item."""
        ...

    def __enter__(self) -> DataSource[TKey, TEntity]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool | None: ...
