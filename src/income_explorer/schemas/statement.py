import math
import re
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

Number = Union[int, float]
SortField = Literal["date", "revenue", "netIncome"]
SortDirection = Literal["ascending", "descending"]

SORT_FIELD_PATTERN = r"^(date|revenue|netIncome)$"

# plain ASCII decimal, optional sign and fraction; no "1_000", "1e3" or "nan"
_BOUND_RE = re.compile(r"[+-]?[0-9]+(\.[0-9]*)?")


class IncomeStatement(BaseModel):
    """One fiscal-year row of the income-statement endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    date: str = Field(..., description="Fiscal period end, YYYY-MM-DD")
    revenue: Number
    net_income: Number = Field(..., alias="netIncome")
    gross_profit: Optional[Number] = Field(None, alias="grossProfit")
    eps: Optional[Number] = None
    operating_income: Optional[Number] = Field(None, alias="operatingIncome")


def parse_bound(value: Any) -> Optional[int]:
    """Coerce a user-supplied bound to an int; anything unusable means unset."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    match = _BOUND_RE.fullmatch(text)
    if match is None:
        return None
    if match.group(1) is None:
        return int(text)
    # fractional input truncates toward zero
    return int(float(text))


class FilterCriteria(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start_year: int | None = Field(None, alias="startYear")
    end_year: int | None = Field(None, alias="endYear")
    min_revenue: int | None = Field(None, alias="minRevenue")
    max_revenue: int | None = Field(None, alias="maxRevenue")
    min_net_income: int | None = Field(None, alias="minNetIncome")
    max_net_income: int | None = Field(None, alias="maxNetIncome")

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_bound(cls, value: Any) -> Optional[int]:
        return parse_bound(value)

    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in type(self).model_fields)


class SortSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: SortField | None = None
    direction: SortDirection = "ascending"


class FilterBoundsHint(BaseModel):
    """Distinct values present in the loaded rows, for populating range controls."""

    model_config = ConfigDict(populate_by_name=True)

    years: list[int] = Field(default_factory=list)
    revenues: list[Number] = Field(default_factory=list)
    net_incomes: list[Number] = Field(default_factory=list, alias="netIncomes")
    revenue_range: tuple[Number, Number] | None = Field(None, alias="revenueRange")
    net_income_range: tuple[Number, Number] | None = Field(
        None, alias="netIncomeRange"
    )
