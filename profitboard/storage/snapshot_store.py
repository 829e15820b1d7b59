"""In-memory month snapshots, keyed by (year, month)."""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional

from profitboard.models.imported_data import ImportedData, PersistedMeta

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Holds the last saved ImportedData per trading month.

    Saved values are never copied or mutated; ImportedData is replaced
    wholesale on every save.
    """

    def __init__(self) -> None:
        self._months: dict[tuple[int, int], ImportedData] = {}
        self._meta: dict[tuple[int, int], PersistedMeta] = {}
        self._lock = threading.Lock()

    def save(self, year: int, month: int, data: ImportedData) -> PersistedMeta:
        meta = PersistedMeta(year=year, month=month)
        with self._lock:
            self._months[(year, month)] = data
            # Re-insert so the newest save is always last.
            self._meta.pop((year, month), None)
            self._meta[(year, month)] = meta
        logger.info(f"Saved snapshot for {year}-{month:02d} ({len(data.stores)} stores)")
        return meta

    def load(self, year: int, month: int) -> Optional[ImportedData]:
        with self._lock:
            return self._months.get((year, month))

    def load_slice(self, year: int, month: int, attr: str) -> Optional[Any]:
        """One ImportedData field of a stored month, or None when the month is absent."""
        data = self.load(year, month)
        if data is None:
            return None
        return getattr(data, attr)

    def get_latest_meta(self) -> Optional[PersistedMeta]:
        with self._lock:
            if not self._meta:
                return None
            return list(self._meta.values())[-1]

    def list_months(self) -> list[tuple[int, int]]:
        with self._lock:
            return sorted(self._months)

    def clear_month(self, year: int, month: int) -> None:
        with self._lock:
            self._months.pop((year, month), None)
            self._meta.pop((year, month), None)

    def clear_all(self) -> None:
        with self._lock:
            self._months.clear()
            self._meta.clear()
