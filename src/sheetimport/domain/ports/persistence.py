"""Ports for persisting domain entities."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence


@runtime_checkable
class Repository[TEntity](Protocol):
    """CRUD contract of the destination store, keyed by entity identifier.

    Implementations are authoritative for identifier, timestamp and version
    advancement and report failures as ``RepositoryError`` subclasses.
    """

    def find(self, entity_id: object) -> TEntity | None: ...

    def find_all(self) -> Sequence[TEntity]: ...

    def persist(self, entity: TEntity) -> None:
        """Insert a new entity; fails when the identifier is already stored."""
        ...

    def merge(self, entity: TEntity) -> TEntity:
        """Write the entity's state and return the store's canonical instance."""
        ...

    def refresh(self, entity: TEntity) -> None:
        """Reload the entity's fields from the store."""
        ...

    def remove(self, entity: TEntity) -> None: ...
