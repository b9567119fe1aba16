"""Repository implementation backed by SQLAlchemy sessions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from sheetimport.adapters.sqlalchemy.mappings import utcnow
from sheetimport.domain.errors import (
    ConcurrencyConflictError,
    DuplicateEntityError,
    RepositoryError,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from sqlalchemy.orm import Session

    from sheetimport.domain.model import Entity

log = logging.getLogger(__name__)


class SqlAlchemyRepository[TEntity: Entity[Any]]:
    """Entity store for one mapped entity class.

    Every mutating call flushes, so generated identifiers, timestamps and
    versions are visible right away; the surrounding unit of work commits.
    """

    def __init__(self, session: Session, entity_cls: type[TEntity]) -> None:
        self.session = session
        self._entity_cls = entity_cls

    def find(self, entity_id: object) -> TEntity | None:
        return self._guarded("find", lambda: self.session.get(self._entity_cls, entity_id))

    def find_all(self) -> Sequence[TEntity]:
        stmt = select(self._entity_cls)
        return self._guarded("find_all", lambda: self.session.scalars(stmt).all())

    def persist(self, entity: TEntity) -> None:
        if entity.id is not None and self.find(entity.id) is not None:
            raise DuplicateEntityError(f"{entity.entity_type} {entity.id} already exists")
        now = utcnow()
        entity.creation_date = now
        entity.update_date = now
        entity.version = None

        def _persist() -> None:
            self.session.add(entity)
            self.session.flush()

        self._guarded("persist", _persist)

    def merge(self, entity: TEntity) -> TEntity:
        def _merge() -> TEntity:
            merged = self.session.merge(entity)
            self.session.flush()
            return merged

        return self._guarded("merge", _merge)

    def refresh(self, entity: TEntity) -> None:
        self._guarded("refresh", lambda: self.session.refresh(entity))

    def remove(self, entity: TEntity) -> None:
        def _remove() -> None:
            self.session.delete(entity)
            self.session.flush()

        self._guarded("remove", _remove)

    def _guarded[TResult](self, operation: str, call: Callable[[], TResult]) -> TResult:
        try:
            return call()
        except StaleDataError as exc:
            raise ConcurrencyConflictError(
                f"{self._entity_cls.__name__} {operation} hit a stale version: {exc}"
            ) from exc
        except IntegrityError as exc:
            raise DuplicateEntityError(
                f"{self._entity_cls.__name__} {operation} violated a constraint: {exc.orig}"
            ) from exc
        except SQLAlchemyError as exc:
            log.debug("%s %s failed", self._entity_cls.__name__, operation, exc_info=True)
            raise RepositoryError(
                f"{self._entity_cls.__name__} {operation} failed: {exc}"
            ) from exc
