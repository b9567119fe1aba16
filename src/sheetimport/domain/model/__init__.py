"""Public domain model surface."""

from __future__ import annotations

from sheetimport.domain.model.entity import (
    AUDIT_FIELDS,
    Entity,
    IdentityEntity,
    UUIDEntity,
    new_uuid,
)

__all__ = [
    "AUDIT_FIELDS",
    "Entity",
    "IdentityEntity",
    "UUIDEntity",
    "new_uuid",
]
