"""Declarative per-row import policy."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import ClassVar

from sheetimport.domain.errors import InvalidArgumentError


@dataclass(frozen=True, slots=True, kw_only=True)
class ImportInstructions:
    """Which actions a row licenses and which modifiers apply.

    The six flags are independent; how combinations interact is decided by the
    reconciler, not here.
    """

    insert: bool = False
    update: bool = False
    merge: bool = False
    remove: bool = False
    force: bool = False
    sync: bool = False

    FLAGS: ClassVar[tuple[str, ...]] = ("insert", "update", "merge", "remove", "force", "sync")

    @classmethod
    def from_flags(cls, **flags: bool) -> ImportInstructions:
        _check_flag_names(flags)
        return cls(**{name: bool(value) for name, value in flags.items()})

    def with_flags(self, **flags: bool) -> ImportInstructions:
        _check_flag_names(flags)
        return replace(self, **{name: bool(value) for name, value in flags.items()})

    def as_dict(self) -> dict[str, bool]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def describe(self) -> str:
        enabled = [name for name in self.FLAGS if getattr(self, name)]
        return ",".join(enabled) if enabled else "none"


def _check_flag_names(flags: dict[str, bool]) -> None:
    unknown = sorted(set(flags) - set(ImportInstructions.FLAGS))
    if unknown:
        raise InvalidArgumentError(f"Unknown import instruction(s): {', '.join(unknown)}")
