"""Sample entities, tables and sheet sources used across the test suite."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import Column, Integer, String

from sheetimport.adapters.openpyxl import (
    CellType,
    IdentityEntitySheetDataSource,
    UUIDEntitySheetDataSource,
    WorkbookDocument,
)
from sheetimport.adapters.sqlalchemy import identity_table, map_entity, uuid_table
from sheetimport.app import ImportProfile
from sheetimport.domain.model import IdentityEntity, UUIDEntity

PEOPLE_HEADER: tuple[str, ...] = (
    "ID",
    "CREATION_DATE",
    "UPDATE_DATE",
    "VERSION",
    "INSERT",
    "UPDATE",
    "MERGE",
    "REMOVE",
    "FORCE",
    "SYNC",
    "NAME",
    "EMAIL",
    "AGE",
)

BADGE_HEADER: tuple[str, ...] = ("ID", "VERSION", "INSERT", "SYNC", "LABEL")


@dataclass(eq=False, kw_only=True)
class Person(IdentityEntity):
    name: str | None = None
    email: str | None = None
    age: int | None = None


@dataclass(eq=False, kw_only=True)
class Employee(IdentityEntity):
    """Same fields as ``Person`` but a different entity variant."""

    name: str | None = None
    email: str | None = None
    age: int | None = None


@dataclass(eq=False, kw_only=True)
class Badge(UUIDEntity):
    label: str | None = None


person_table = identity_table(
    "person",
    Column("name", String(200), nullable=True),
    Column("email", String(200), nullable=True),
    Column("age", Integer, nullable=True),
)

badge_table = uuid_table(
    "badge",
    Column("label", String(100), nullable=True),
)


def configure_people() -> None:
    map_entity(Person, person_table)
    map_entity(Badge, badge_table)


class PersonSheetSource(IdentityEntitySheetDataSource[Person]):
    def create_entity_instance(self) -> Person:
        return Person()

    def read_item_data(self, entity: Person) -> None:
        entity.name = self.read_column("NAME", CellType.STRING)
        entity.email = self.read_column("EMAIL", CellType.STRING)
        entity.age = self.read_column("AGE", CellType.INT)

    def write_item_data(self, row: int, entity: Person) -> bool:
        return any(
            [
                self.write_column(row, "NAME", CellType.STRING, entity.name),
                self.write_column(row, "EMAIL", CellType.STRING, entity.email),
                self.write_column(row, "AGE", CellType.INT, entity.age),
            ]
        )


class BadgeSheetSource(UUIDEntitySheetDataSource[Badge]):
    def create_entity_instance(self) -> Badge:
        return Badge()

    def read_item_data(self, entity: Badge) -> None:
        entity.label = self.read_column("LABEL", CellType.STRING)

    def write_item_data(self, row: int, entity: Badge) -> bool:
        return self.write_column(row, "LABEL", CellType.STRING, entity.label)


def build_person_source(path: Any, *, sheet: int | str, header_row: int) -> PersonSheetSource:
    return PersonSheetSource(WorkbookDocument(path, sheet=sheet), header_row=header_row)


people_profile: ImportProfile[Person] = ImportProfile(
    name="people",
    entity_cls=Person,
    build_source=build_person_source,
    configure=configure_people,
)


def make_people_profile() -> ImportProfile[Person]:
    return people_profile
