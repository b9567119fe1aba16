"""Application services for importing tabular rows into the entity store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sheetimport.domain.dataimport import ImportReport, Reconciler
from sheetimport.domain.errors import RepositoryError

if TYPE_CHECKING:
    from collections.abc import Callable

    from sheetimport.domain.model import Entity
    from sheetimport.domain.ports import DataSource, ImportUnitOfWork

log = logging.getLogger(__name__)


def import_rows[TEntity: Entity[Any]](
    *,
    source: DataSource[Any, TEntity],
    unit_of_work_factory: Callable[[], ImportUnitOfWork[TEntity]],
    fail_fast: bool = False,
) -> ImportReport:
    """Reconcile every row of ``source`` and return the run summary.

    Each reconciled row is committed on its own, and only then written back, so
    a row never shows store state that did not survive. A store failure rolls
    back that row only and the run carries on, unless ``fail_fast`` is set.
    Source errors (unreadable document, malformed cells) abort the run; the
    source is closed, and thus flushed, either way.
    """

    report = ImportReport()

    with unit_of_work_factory() as uow, source:
        reconciler = Reconciler(repository=uow.repository, source=source)
        for item in source:
            try:
                decision = reconciler.apply(item)
                uow.commit()
                reconciler.write_back(item, decision)
            except RepositoryError as exc:
                uow.rollback()
                if item.result.error is None:
                    item.result.fail(exc)
                report.record(item)
                if fail_fast:
                    raise
                log.exception("Row %s could not be imported", item.id)
                continue
            report.record(item)

    log.info("Import finished: %s", report.summary())
    return report
