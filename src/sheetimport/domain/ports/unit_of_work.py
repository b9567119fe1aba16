"""Unit-of-work abstraction around the destination repository."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from sheetimport.domain.ports.persistence import Repository


@runtime_checkable
class ImportUnitOfWork[TEntity](Protocol):
    """Transaction boundary for one import run."""

    @property
    def repository(self) -> Repository[TEntity]: ...

    def __enter__(self) -> ImportUnitOfWork[TEntity]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool | None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...
