"""Application orchestration entry points."""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from functools import partial
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from sheetimport.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from sheetimport.config import ConfigurationError, get_import_config
from sheetimport.domain.data_integration import import_rows

if TYPE_CHECKING:
    from collections.abc import Callable

    from sheetimport.domain.dataimport import ImportReport
    from sheetimport.domain.model import Entity
    from sheetimport.domain.ports import DataSource, ImportUnitOfWork

type SheetRef = int | str
type UnitOfWorkFactory[TEntity] = Callable[[], ImportUnitOfWork[TEntity]]


log = getLogger(__name__)


class SourceBuilder[TEntity](Protocol):
    def __call__(
        self,
        path: Path,
        *,
        sheet: SheetRef,
        header_row: int,
    ) -> DataSource[Any, TEntity]: ...


@dataclass(frozen=True, slots=True, kw_only=True)
class ImportProfile[TEntity: Entity[Any]]:
    """Everything needed to import one kind of entity from a workbook.

    ``configure`` runs before the store is started; it is where integrators
    call ``map_entity`` so the entity's table is known to the adapter.
    """

    name: str
    entity_cls: type[TEntity]
    build_source: SourceBuilder[TEntity]
    configure: Callable[[], None] | None = None


def load_profile(reference: str) -> ImportProfile[Any]:
    """Resolve ``"package.module:attribute"`` to an ``ImportProfile``.

    The attribute may be the profile itself or a zero-argument factory.
    """

    module_name, _, attribute = reference.partition(":")
    if not module_name or not attribute:
        raise ConfigurationError(
            f"Profile reference must look like 'package.module:attribute', got {reference!r}"
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigurationError(f"Cannot import profile module {module_name!r}") from exc
    try:
        candidate = getattr(module, attribute)
    except AttributeError as exc:
        raise ConfigurationError(f"Module {module_name!r} has no attribute {attribute!r}") from exc
    if not isinstance(candidate, ImportProfile) and callable(candidate):
        candidate = candidate()
    if not isinstance(candidate, ImportProfile):
        raise ConfigurationError(f"{reference!r} does not resolve to an ImportProfile")
    return candidate


def run_sheet_import[TEntity: Entity[Any]](
    *,
    profile: ImportProfile[TEntity],
    workbook_path: str | Path,
    sheet: SheetRef = 0,
    fail_fast: bool | None = None,
    header_row: int | None = None,
    database_uri: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory[TEntity] | None = None,
) -> ImportReport:
    """Import one worksheet with the given profile using the configured adapters."""

    config = get_import_config()
    effective_fail_fast = config.fail_fast if fail_fast is None else fail_fast
    effective_header_row = config.header_row if header_row is None else header_row

    if profile.configure is not None:
        profile.configure()
    if unit_of_work_factory is None:
        if not is_started():
            startup(database_uri=database_uri)
        unit_of_work_factory = partial(SqlAlchemyUnitOfWork, profile.entity_cls)

    source = profile.build_source(Path(workbook_path), sheet=sheet, header_row=effective_header_row)
    log.info(
        "Starting import: profile=%s, workbook=%s, sheet=%s, fail_fast=%s",
        profile.name,
        workbook_path,
        sheet,
        effective_fail_fast,
    )

    report = import_rows(
        source=source,
        unit_of_work_factory=unit_of_work_factory,
        fail_fast=effective_fail_fast,
    )

    log.info(f"Finished import {profile.name}: {report.summary()}")
    return report
