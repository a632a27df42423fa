from __future__ import annotations

from datetime import date
from operator import attrgetter
from typing import Iterable, Optional, Sequence

from income_explorer.schemas.statement import (
    FilterBoundsHint,
    FilterCriteria,
    IncomeStatement,
    Number,
    SortField,
    SortSpec,
)

SORT_ATTRS: dict[str, str] = {
    "date": "date",
    "revenue": "revenue",
    "netIncome": "net_income",
}

ARROWS = {"ascending": "↑", "descending": "↓"}


def record_year(record: IncomeStatement) -> Optional[int]:
    try:
        return date.fromisoformat(record.date[:10]).year
    except ValueError:
        pass
    head = record.date[:4]
    return int(head) if head.isdigit() else None


def _within(value: Optional[Number], low: Optional[int], high: Optional[int]) -> bool:
    if low is None and high is None:
        return True
    if value is None:
        return False
    if low is not None and value < low:
        return False
    if high is not None and value > high:
        return False
    return True


def matches(record: IncomeStatement, criteria: FilterCriteria) -> bool:
    return (
        _within(record_year(record), criteria.start_year, criteria.end_year)
        and _within(record.revenue, criteria.min_revenue, criteria.max_revenue)
        and _within(
            record.net_income, criteria.min_net_income, criteria.max_net_income
        )
    )


def apply_filters(
    records: Iterable[IncomeStatement], criteria: FilterCriteria
) -> list[IncomeStatement]:
    """Return the records passing every set bound, in input order."""
    return [r for r in records if matches(r, criteria)]


def sort_records(
    records: Sequence[IncomeStatement], spec: SortSpec
) -> list[IncomeStatement]:
    """Stable sort on the active field; no active field keeps input order.

    ``sorted(..., reverse=True)`` keeps equal keys in their original order,
    so descending only flips the comparison and ties stay put.
    """
    if spec.field is None:
        return list(records)
    return sorted(
        records,
        key=attrgetter(SORT_ATTRS[spec.field]),
        reverse=spec.direction == "descending",
    )


def toggle_sort(spec: SortSpec, field: SortField) -> SortSpec:
    if spec.field == field:
        flipped = "descending" if spec.direction == "ascending" else "ascending"
        return SortSpec(field=field, direction=flipped)
    return SortSpec(field=field, direction="ascending")


def sort_indicator(spec: SortSpec, field: str) -> str:
    if spec.field != field:
        return ""
    return ARROWS[spec.direction]


def _distinct(values: Iterable) -> list:
    return list(dict.fromkeys(v for v in values if v is not None))


def derive_bounds(records: Sequence[IncomeStatement]) -> FilterBoundsHint:
    revenues = _distinct(r.revenue for r in records)
    net_incomes = _distinct(r.net_income for r in records)
    return FilterBoundsHint(
        years=_distinct(record_year(r) for r in records),
        revenues=revenues,
        net_incomes=net_incomes,
        revenue_range=(min(revenues), max(revenues)) if revenues else None,
        net_income_range=(min(net_incomes), max(net_incomes)) if net_incomes else None,
    )
