"""SQLAlchemy adapter package for sheetimport."""

from __future__ import annotations

from .mappings import (
    UTCDateTime,
    audit_columns,
    create_all_tables,
    identity_table,
    map_entity,
    mapper_registry,
    uuid_table,
)
from .repositories import SqlAlchemyRepository
from .unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyRepository",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "UTCDateTime",
    "audit_columns",
    "configured_engine",
    "create_all_tables",
    "identity_table",
    "is_started",
    "map_entity",
    "mapper_registry",
    "shutdown",
    "startup",
    "uuid_table",
]
