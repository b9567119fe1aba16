"""SQLAlchemy-backed unit of work for import runs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from sheetimport.adapters.sqlalchemy.mappings import create_all_tables
from sheetimport.adapters.sqlalchemy.repositories import SqlAlchemyRepository
from sheetimport.config.storage import get_database_config
from sheetimport.domain.errors import RepositoryError

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine

    from sheetimport.domain.model import Entity

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call sheetimport.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine, tables, and session factory.

    Entities must be mapped (``map_entity``) before this is called so their
    tables exist in the shared metadata.
    """

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )
    if _STATE.engine is not None:
        shutdown()

    if engine is None:
        config = get_database_config(uri=database_uri)
        engine = create_engine(config.uri, echo=config.echo)
    log.info("Starting SQLAlchemy adapter on %s", engine.url)
    create_all_tables(engine)
    _STATE.engine = engine


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


class SqlAlchemyUnitOfWork[TEntity: Entity[Any]]:
    """One session per ``with`` block, exposing a repository for ``entity_cls``."""

    def __init__(
        self,
        entity_cls: type[TEntity],
        *,
        session_factory: sessionmaker[Session] | None = None,
    ) -> None:
        self.entity_cls = entity_cls
        self.session_factory: sessionmaker[Session] = session_factory or _STATE.session_factory
        self._session: Session | None = None
        self._repository: SqlAlchemyRepository[TEntity] | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork[TEntity]:
        self.session = self.session_factory()
        self._repository = SqlAlchemyRepository(self.session, self.entity_cls)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        try:
            if exc_type is not None:
                self.rollback()
        finally:
            self.session.close()
            self.session = None
            self._repository = None
        return False

    def commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            raise RepositoryError(f"Commit failed: {exc}") from exc

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repository(self) -> SqlAlchemyRepository[TEntity]:
        if self._repository is None:
            raise StartupError("Unit of work session not initialised")
        return self._repository

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session
