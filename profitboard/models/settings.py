"""Pydantic model for the per-month application settings."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .enums import CategoryType

CUSTOM_CATEGORIES: tuple[str, ...] = (
    "市場仕入",
    "LFC",
    "サラダ",
    "加工品",
    "消耗品",
    "直伝",
    "その他",
)


class AppSettings(BaseModel):
    """Settings that drive a month's calculation."""

    target_year: int = Field(ge=1900, le=9999)
    target_month: int = Field(ge=1, le=12)
    target_gross_profit_rate: float = Field(default=0.25, ge=0, le=1.0)
    warning_threshold: float = Field(default=0.23, ge=0, le=1.0)
    flower_cost_rate: float = Field(default=0.80, ge=0, le=1.2)
    direct_produce_cost_rate: float = Field(default=0.85, ge=0, le=1.2)
    default_markup_rate: float = Field(default=0.26, ge=0, le=1.0)
    default_budget: float = Field(default=6_450_000, ge=0)
    data_end_day: Optional[int] = Field(
        default=None,
        ge=1,
        le=31,
        description="Only aggregate days up to and including this day",
    )
    supplier_category_map: dict[str, CategoryType] = Field(default_factory=dict)
    custom_categories: list[str] = Field(
        default_factory=lambda: list(CUSTOM_CATEGORIES)
    )

    # Comparison period for prior-year alignment. None means "same month,
    # previous year". The offset override is unbounded here;
    # consumers clamp it before use.
    prev_year_source_year: Optional[int] = None
    prev_year_source_month: Optional[int] = None
    prev_year_dow_offset: Optional[float] = None

    @field_validator("prev_year_source_month")
    @classmethod
    def source_month_in_range(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and not (1 <= v <= 12):
            raise ValueError(f"prev_year_source_month must be 1-12, got {v}")
        return v
