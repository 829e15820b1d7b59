"""FastAPI application for profitboard: calculation and import endpoints."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, TypeAdapter

from profitboard.config.settings import Settings
from profitboard.engine.cache import CalculationCache
from profitboard.engine.calculator import MonthlyResult
from profitboard.engine.prev_year import PrevYearComparison, auto_load_prev_year
from profitboard.engine.result import StoreForecast, StoreResult
from profitboard.models.enums import DataType, DiffAction
from profitboard.models.imported_data import ImportedData, PersistedMeta
from profitboard.models.settings import AppSettings
from profitboard.orchestrator import CalculationRunner, ImportCoordinator, ImportStatus
from profitboard.orchestrator.diff import DiffResult
from profitboard.storage.snapshot_store import SnapshotStore

settings = Settings()

logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

app = FastAPI(title="profitboard API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# In-memory month snapshots (replaced by a real store later)
snapshot_store = SnapshotStore()
runner = CalculationRunner(
    cache=CalculationCache(
        max_entries=settings.cache_max_entries,
        mode=settings.fingerprint_mode,
    ),
    use_worker_thread=settings.use_worker_thread,
)
coordinator = ImportCoordinator(
    snapshot_store,
    runner,
    overflow_days=settings.prev_year_overflow_days,
)

_store_result_adapter = TypeAdapter(StoreResult)
_diff_adapter = TypeAdapter(DiffResult)
_meta_adapter = TypeAdapter(PersistedMeta)
_prev_year_adapter = TypeAdapter(PrevYearComparison)
_forecast_adapter = TypeAdapter(StoreForecast)


class CalculationRequest(BaseModel):
    data: ImportedData
    settings: AppSettings
    days_in_month: Optional[int] = Field(default=None, ge=28, le=31)


class ImportRequest(BaseModel):
    data: ImportedData
    settings: AppSettings
    imported_types: list[DataType]
    action: Optional[DiffAction] = None


def _dump_monthly(result: MonthlyResult) -> dict[str, Any]:
    return {
        "stores": {
            sid: _store_result_adapter.dump_python(r, mode="json")
            for sid, r in result.stores.items()
        },
        "aggregate": (
            _store_result_adapter.dump_python(result.aggregate, mode="json")
            if result.aggregate is not None
            else None
        ),
        "prev_year": (
            _prev_year_adapter.dump_python(result.prev_year, mode="json")
            if result.prev_year is not None
            else None
        ),
    }


@app.post("/api/calculations")
async def calculate(body: CalculationRequest):
    """Per-store results and the aggregate for a posted month."""
    result = await runner.calculate(body.data, body.settings, body.days_in_month)
    return _dump_monthly(result)


@app.post("/api/forecasts")
async def forecast(body: CalculationRequest):
    """Weekly summaries, weekday averages, outlier days and month-end projections."""
    result = await runner.calculate(body.data, body.settings, body.days_in_month)
    year, month = body.settings.target_year, body.settings.target_month

    def dump(r: StoreResult) -> dict[str, Any]:
        return _forecast_adapter.dump_python(
            runner.engine.forecast_store(r, year, month), mode="json"
        )

    return {
        "stores": {sid: dump(r) for sid, r in result.stores.items()},
        "aggregate": dump(result.aggregate) if result.aggregate is not None else None,
    }


@app.post("/api/imports")
async def run_import(body: ImportRequest):
    """Reconcile an import with the stored month; 409 while another import runs."""
    summary = await coordinator.run_import(
        body.data,
        body.imported_types,
        body.settings,
        action=body.action,
    )
    if summary.status == ImportStatus.REJECTED:
        raise HTTPException(status_code=409, detail="Another import is in progress")

    return {
        "status": summary.status.value,
        "message": summary.message,
        "imported_types": [t.value for t in summary.imported_types],
        "store_count": summary.store_count,
        "diff": (
            _diff_adapter.dump_python(summary.diff, mode="json")
            if summary.diff is not None
            else None
        ),
        "results": _dump_monthly(summary.result) if summary.result is not None else None,
    }


@app.get("/api/months/latest")
async def latest_month():
    """Metadata of the most recently saved month, for the restore prompt."""
    meta = snapshot_store.get_latest_meta()
    if meta is None:
        raise HTTPException(status_code=404, detail="No saved month")
    return _meta_adapter.dump_python(meta, mode="json")


@app.get("/api/months/{year}/{month}/results")
async def month_results(year: int, month: int):
    """Recalculate a stored month with default settings and its stored comparison month."""
    data = snapshot_store.load(year, month)
    if data is None:
        raise HTTPException(status_code=404, detail=f"No data saved for {year}-{month:02d}")
    month_settings = AppSettings(target_year=year, target_month=month)
    data = auto_load_prev_year(
        snapshot_store, data, month_settings, settings.prev_year_overflow_days
    )
    result = await runner.calculate(data, month_settings)
    return _dump_monthly(result)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


def run() -> None:
    import uvicorn

    uvicorn.run("profitboard.main:app", host="0.0.0.0", port=8000)
