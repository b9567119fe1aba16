from __future__ import annotations

from dataclasses import FrozenInstanceError

import pytest

from sheetimport.domain.dataimport import ImportInstructions
from sheetimport.domain.errors import InvalidArgumentError


def test_instructions_default_to_nothing_licensed() -> None:
    instructions = ImportInstructions()

    assert not any(instructions.as_dict().values())
    assert instructions.describe() == "none"


def test_from_flags_and_describe() -> None:
    instructions = ImportInstructions.from_flags(sync=True, insert=True, update=True)

    assert instructions == ImportInstructions(insert=True, update=True, sync=True)
    assert instructions.describe() == "insert,update,sync"


def test_with_flags_derives_a_new_value() -> None:
    base = ImportInstructions(insert=True)

    derived = base.with_flags(insert=False, remove=True)

    assert base.insert is True
    assert derived == ImportInstructions(remove=True)


@pytest.mark.parametrize("factory", ["from_flags", "with_flags"])
def test_unknown_flag_names_are_rejected(factory: str) -> None:
    target = ImportInstructions if factory == "from_flags" else ImportInstructions()

    with pytest.raises(InvalidArgumentError, match="upsert"):
        getattr(target, factory)(upsert=True)


def test_instructions_are_immutable() -> None:
    instructions = ImportInstructions()

    with pytest.raises(FrozenInstanceError):
        instructions.insert = True  # type: ignore[misc]
