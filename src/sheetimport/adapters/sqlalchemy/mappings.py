"""SQLAlchemy mapping helpers for importable entities.

Entities stay plain dataclasses; integrators describe their table with
``identity_table``/``uuid_table`` and bind the class with ``map_entity``.
The ``version`` column is SQLAlchemy's version counter, so every UPDATE and
DELETE is guarded by the version the session loaded.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    Integer,
    String,
    Table,
    TypeDecorator,
    inspect,
    orm,
)
from sqlalchemy.exc import ArgumentError

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from sheetimport.domain.model import Entity

log = logging.getLogger(__name__)

UUID_LENGTH = 36


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def utcnow() -> datetime:
    return datetime.now(UTC)


def next_version(current: int | None) -> int:
    """Version counter: 0 on insert, +1 on every update."""
    return 0 if current is None else current + 1


def audit_columns() -> list[Column[Any]]:
    return [
        Column("creation_date", UTCDateTime(), nullable=False, default=utcnow),
        Column("update_date", UTCDateTime(), nullable=False, default=utcnow, onupdate=utcnow),
        Column("version", Integer, nullable=False),
    ]


def identity_table(name: str, *columns: Any) -> Table:
    """Table for an ``IdentityEntity``: autoincrement integer key."""
    return Table(
        name,
        mapper_registry.metadata,
        Column("id", Integer, primary_key=True, autoincrement=True),
        *audit_columns(),
        *columns,
    )


def uuid_table(name: str, *columns: Any) -> Table:
    """Table for a ``UUIDEntity``: textual UUID key generated by the entity."""
    return Table(
        name,
        mapper_registry.metadata,
        Column("id", String(UUID_LENGTH), primary_key=True),
        *audit_columns(),
        *columns,
    )


def map_entity[TEntity: Entity[Any]](
    entity_cls: type[TEntity],
    table: Table,
    **kwargs: Any,
) -> orm.Mapper[TEntity]:
    """Map ``entity_cls`` imperatively onto ``table``; repeated calls are no-ops."""

    existing = inspect(entity_cls, raiseerr=False)
    if existing is not None:
        if existing.local_table is not table:
            raise ArgumentError(
                f"{entity_cls.__name__} is already mapped to table {existing.local_table}"
            )
        return existing
    log.info("Mapping %s onto table %s", entity_cls.__name__, table.name)
    return mapper_registry.map_imperatively(
        entity_cls,
        table,
        version_id_col=table.c.version,
        version_id_generator=next_version,
        **kwargs,
    )


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
