"""Guarded import flow: diff, decide, save, recalculate."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from profitboard.engine.calculator import MonthlyResult
from profitboard.engine.prev_year import OVERFLOW_DAYS, auto_load_prev_year
from profitboard.models.enums import DataType, DiffAction
from profitboard.models.imported_data import ImportedData
from profitboard.models.settings import AppSettings
from profitboard.storage.snapshot_store import SnapshotStore

from .calculation_runner import CalculationRunner
from .diff import DiffResult, compute_diff, summarize_diff
from .merge import apply_diff_decision

logger = logging.getLogger(__name__)


class ImportStatus(str, Enum):
    SAVED = "saved"
    PENDING_CONFIRMATION = "pending_confirmation"
    REJECTED = "rejected"


@dataclass(frozen=True)
class ImportSummary:
    status: ImportStatus
    imported_types: tuple[DataType, ...] = ()
    diff: Optional[DiffResult] = None
    message: str = ""
    store_count: int = 0
    result: Optional[MonthlyResult] = field(default=None, repr=False)


class ImportCoordinator:
    """Runs at most one import at a time.

    A second import started while one is in flight is turned away at once
    with a REJECTED summary; it is never queued.
    """

    def __init__(
        self,
        snapshot_store: SnapshotStore,
        runner: CalculationRunner,
        overflow_days: int = OVERFLOW_DAYS,
    ) -> None:
        self.snapshot_store = snapshot_store
        self.runner = runner
        self.overflow_days = overflow_days
        self._importing = False

    @property
    def is_importing(self) -> bool:
        return self._importing

    async def run_import(
        self,
        incoming: ImportedData,
        imported_types: Iterable[DataType],
        settings: AppSettings,
        action: Optional[DiffAction] = None,
    ) -> ImportSummary:
        """Reconcile ``incoming`` with the stored month and save the outcome.

        When the diff holds modifications or removals and no ``action`` is
        given, nothing is saved and the diff is returned for review.
        """
        types = tuple(imported_types)
        if self._importing:
            logger.warning("Import already in progress, rejecting new import")
            return ImportSummary(status=ImportStatus.REJECTED, imported_types=types)

        self._importing = True
        try:
            year, month = settings.target_year, settings.target_month
            existing = self.snapshot_store.load(year, month)

            diff: Optional[DiffResult] = None
            if existing is None:
                final = incoming
            else:
                diff = compute_diff(existing, incoming, types)
                if diff.needs_confirmation and action is None:
                    logger.info(f"Import for {year}-{month:02d} needs confirmation: {summarize_diff(diff)}")
                    return ImportSummary(
                        status=ImportStatus.PENDING_CONFIRMATION,
                        imported_types=types,
                        diff=diff,
                        message=summarize_diff(diff),
                    )
                final = apply_diff_decision(
                    action or DiffAction.KEEP_EXISTING, incoming, existing, types
                )

            self.snapshot_store.save(year, month, final)

            working = auto_load_prev_year(
                self.snapshot_store, final, settings, self.overflow_days
            )
            result = await self.runner.calculate(working, settings)

            return ImportSummary(
                status=ImportStatus.SAVED,
                imported_types=types,
                diff=diff,
                message=summarize_diff(diff) if diff is not None else "initial import",
                store_count=len(final.stores),
                result=result,
            )
        except Exception:
            logger.exception("Import failed")
            raise
        finally:
            self._importing = False
