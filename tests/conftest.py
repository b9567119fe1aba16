from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from sheetimport.adapters.sqlalchemy import create_all_tables
from sheetimport.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, shutdown, startup
from tests.helpers.people import PEOPLE_HEADER, Person, configure_people
from tests.helpers.workbooks import write_workbook

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping, Sequence
    from pathlib import Path


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:")
    configure_people()
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, expire_on_commit=False)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyUnitOfWork[Person]]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyUnitOfWork[Person]:
        return SqlAlchemyUnitOfWork(Person)

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def people_workbook(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a people sheet under ``tmp_path``."""

    def factory(
        rows: Sequence[Mapping[str, object] | None],
        *,
        name: str = "people.xlsx",
        header: Sequence[str] = PEOPLE_HEADER,
    ) -> Path:
        return write_workbook(tmp_path / name, header, rows, title="People")

    return factory
