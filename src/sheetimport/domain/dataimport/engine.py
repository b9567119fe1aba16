"""Reconcile one import item against the destination store.

Decision order:
1) look the destination up by the payload's identifier
2) destination absent: insert when licensed, otherwise skip
3) destination present with an identical payload: unchanged
4) destination present with a different payload: remove, merge, update
   (version-guarded, ``force`` bypasses the guard) or leave it overridden,
   in that order of precedence
5) once the store change is final, write the canonical state back into the
   source row when ``sync`` is set

``apply`` covers steps 1-4 and ``write_back`` step 5, so a caller holding a
transaction commits in between. ``reconcile`` runs both.

Store failures are recorded on the item result and re-raised; nothing is retried.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sheetimport.domain.errors import RepositoryError
from sheetimport.domain.model import Entity

from .result import ImportStatus

if TYPE_CHECKING:
    from sheetimport.domain.ports import DataSource, Repository

    from .item import ImportItem
    from .result import ImportResult

log = logging.getLogger(__name__)


@dataclass(slots=True, kw_only=True)
class Decision[TEntity]:
    """What ``apply`` did to the store, and the entity the row should mirror."""

    status: ImportStatus
    canonical: TEntity | None = None
    message: str | None = None


@dataclass(slots=True)
class Reconciler[TEntity: Entity[Any]]:
    """Apply the per-row import policy through a repository."""

    repository: Repository[TEntity]
    source: DataSource[Any, TEntity] | None = None

    def reconcile(self, item: ImportItem[Hashable, TEntity]) -> ImportResult:
        decision = self.apply(item)
        self.write_back(item, decision)
        return item.result

    def apply(self, item: ImportItem[Hashable, TEntity]) -> Decision[TEntity]:
        try:
            decision = self._decide(item)
        except RepositoryError as exc:
            self._fail(item, exc)
            raise
        item.result.record(decision.status, decision.message)
        log.debug(
            "Row %s [%s]: %s%s",
            item.id,
            item.instructions.describe(),
            decision.status,
            f" ({decision.message})" if decision.message else "",
        )
        return decision

    def write_back(self, item: ImportItem[Hashable, TEntity], decision: Decision[TEntity]) -> None:
        if not item.sync:
            return
        if self.source is None:
            log.debug("Row %s requests sync but no source is attached", item.id)
            return
        if decision.canonical is None:
            log.debug("Row %s: no stored entity to write back after %s", item.id, decision.status)
            return
        canonical = decision.canonical
        try:
            self.repository.refresh(canonical)
        except RepositoryError as exc:
            self._fail(item, exc)
            raise
        item.data.assign_state(canonical)
        self.source.sync(item)

    @staticmethod
    def _fail(item: ImportItem[Hashable, TEntity], error: RepositoryError) -> None:
        item.result.fail(error)
        log.warning("Row %s failed: %s", item.id, error)

    def _decide(self, item: ImportItem[Hashable, TEntity]) -> Decision[TEntity]:
        source = item.data
        destination = self._find_destination(source)

        if destination is None:
            if item.insert:
                self.repository.persist(source)
                return Decision(status=ImportStatus.INSERTED, canonical=source)
            return Decision(status=ImportStatus.SKIPPED, message="insert not licensed")

        if source.same_content(destination):
            return Decision(status=ImportStatus.UNCHANGED, canonical=destination)

        if item.remove:
            self.repository.remove(destination)
            return Decision(status=ImportStatus.DELETED)
        if item.merge:
            return self._merge(source, destination)
        if item.update:
            return self._update(source, destination, force=item.force)

        differing = ", ".join(source.differing_fields(destination))
        return Decision(
            status=ImportStatus.OVERRIDDEN,
            canonical=destination,
            message=f"differs in {differing}; no licensed action",
        )

    def _find_destination(self, source: TEntity) -> TEntity | None:
        if source.id is None:
            return None
        return self.repository.find(source.id)

    def _merge(self, source: TEntity, destination: TEntity) -> Decision[TEntity]:
        patch = {
            name: getattr(source, name)
            for name in source.differing_fields(destination)
            if getattr(source, name) is not None
        }
        if not patch:
            return Decision(
                status=ImportStatus.UNCHANGED,
                canonical=destination,
                message="only blank source fields differ",
            )
        for name, value in patch.items():
            setattr(destination, name, value)
        canonical = self.repository.merge(destination)
        return Decision(
            status=ImportStatus.UPDATED,
            canonical=canonical,
            message=f"merged {', '.join(patch)}",
        )

    def _update(
        self,
        source: TEntity,
        destination: TEntity,
        *,
        force: bool,
    ) -> Decision[TEntity]:
        stored_version = destination.version
        stale = _is_stale(source, destination)
        if stale and not force:
            return Decision(
                status=ImportStatus.REJECTED,
                canonical=destination,
                message=(
                    f"row version {source.version} does not match "
                    f"stored version {stored_version}"
                ),
            )
        for name in source.payload_fields():
            setattr(destination, name, getattr(source, name))
        canonical = self.repository.merge(destination)
        if stale:
            return Decision(
                status=ImportStatus.FORCE_UPDATED,
                canonical=canonical,
                message=f"overwrote stored version {stored_version}",
            )
        return Decision(status=ImportStatus.UPDATED, canonical=canonical)


def _is_stale(source: Entity[Any], destination: Entity[Any]) -> bool:
    """A row is stale when it carries a version other than the stored one."""
    if source.version is None or destination.version is None:
        return False
    return source.version != destination.version
