"""
Base building blocks:
identity, variant discriminator and audit metadata.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import TYPE_CHECKING, ClassVar, Final
from uuid import uuid4

from sheetimport.domain.errors import InvalidArgumentError

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

AUDIT_FIELDS: Final[frozenset[str]] = frozenset({"id", "creation_date", "update_date", "version"})


def new_uuid() -> str:
    return str(uuid4())


@dataclass(eq=False, kw_only=True)
class Entity[TId]:
    """A persisted record: identifier, audit metadata and payload fields.

    Every dataclass field that is neither an audit field nor private is payload.
    Subclasses must be declared with ``@dataclass(eq=False, kw_only=True)`` so the
    equality contract below is not replaced by field-wise comparison.

    Equality is variant-safe: two entities are equal only when each accepts the
    other (same ``ENTITY_TYPE``) and both carry the same non-null identifier.
    """

    id: TId | None = None
    creation_date: datetime | None = None
    update_date: datetime | None = None
    version: int | None = None

    # class-level discriminator; each subclass gets its own unless it declares one
    ENTITY_TYPE: ClassVar[str] = "entity"

    def __init_subclass__(cls, **kwargs: object) -> None:
        super().__init_subclass__(**kwargs)
        if "ENTITY_TYPE" not in cls.__dict__:
            cls.ENTITY_TYPE = cls.__name__

    @property
    def entity_type(self) -> str:
        return self.ENTITY_TYPE

    def can_equal(self, other: object) -> bool:
        return isinstance(other, Entity) and other.entity_type == self.entity_type

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Entity):
            return NotImplemented
        return (
            self.can_equal(other)
            and other.can_equal(self)
            and self.id is not None
            and self.id == other.id
        )

    def __hash__(self) -> int:
        return hash((self.entity_type, self.id))

    @classmethod
    def payload_fields(cls) -> tuple[str, ...]:
        return tuple(
            f.name
            for f in fields(cls)
            if f.name not in AUDIT_FIELDS and not f.name.startswith("_")
        )

    def payload(self) -> dict[str, object]:
        return {name: getattr(self, name) for name in self.payload_fields()}

    def same_content(self, other: object) -> bool:
        """Compare payload only; identifiers and audit metadata are ignored."""
        if not isinstance(other, Entity):
            return False
        if not (self.can_equal(other) and other.can_equal(self)):
            return False
        return self.payload() == other.payload()

    def differing_fields(self, other: Entity[TId]) -> tuple[str, ...]:
        if not (self.can_equal(other) and other.can_equal(self)):
            return self.payload_fields()
        return tuple(
            name
            for name in self.payload_fields()
            if getattr(self, name) != getattr(other, name)
        )

    def assign_state(self, other: Entity[TId]) -> None:
        """Overwrite identifier, audit metadata and payload with ``other``'s values."""
        if not (self.can_equal(other) and other.can_equal(self)):
            raise InvalidArgumentError(
                f"Cannot copy state of {other.entity_type} into {self.entity_type}"
            )
        for name in (*sorted(AUDIT_FIELDS), *self.payload_fields()):
            setattr(self, name, getattr(other, name))

    def clone(self) -> Entity[TId]:
        return replace(self)


@dataclass(eq=False, kw_only=True)
class IdentityEntity(Entity[int]):
    """Entity whose integer identifier is assigned by the store on persist."""


@dataclass(eq=False, kw_only=True)
class UUIDEntity(Entity[str]):
    """Entity that generates its own UUID identifier when none is given.

    Only safe without redundancy: two independent generators could, however
    unlikely, produce the same value.
    """

    ID_GENERATOR: ClassVar[Callable[[], str]] = new_uuid

    def __post_init__(self) -> None:
        if self.id is None:
            self.id = type(self).ID_GENERATOR()
