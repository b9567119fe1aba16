"""Unit of reconciliation work."""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from sheetimport.domain.errors import InvalidArgumentError

from .result import ImportResult

if TYPE_CHECKING:
    from .instructions import ImportInstructions


@dataclass(eq=False)
class ImportItem[TKey: Hashable, TData]:
    """Row key, source payload, instructions and the accumulated result.

    Identity is the key alone: two items describe the same record whenever their
    keys match, whatever their payload or outcome.
    """

    id: TKey
    data: TData
    instructions: ImportInstructions
    result: ImportResult = field(default_factory=ImportResult)

    def __post_init__(self) -> None:
        for name in ("id", "data", "instructions", "result"):
            if getattr(self, name) is None:
                raise InvalidArgumentError.null_argument(name)

    @property
    def insert(self) -> bool:
        return self.instructions.insert

    @property
    def update(self) -> bool:
        return self.instructions.update

    @property
    def merge(self) -> bool:
        return self.instructions.merge

    @property
    def remove(self) -> bool:
        return self.instructions.remove

    @property
    def force(self) -> bool:
        return self.instructions.force

    @property
    def sync(self) -> bool:
        return self.instructions.sync

    @property
    def data_changed(self) -> bool:
        return self.result.data_changed

    def can_equal(self, other: object) -> bool:
        return isinstance(other, ImportItem)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ImportItem):
            return NotImplemented
        return other.can_equal(self) and self.can_equal(other) and self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
