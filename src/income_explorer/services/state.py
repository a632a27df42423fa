import logging
import threading
from dataclasses import dataclass, field
from typing import Iterable

from income_explorer.schemas.statement import (
    FilterBoundsHint,
    FilterCriteria,
    IncomeStatement,
    SortField,
    SortSpec,
)
from income_explorer.schemas.view import Column, StatementView
from income_explorer.services.engine import (
    apply_filters,
    derive_bounds,
    sort_indicator,
    sort_records,
    toggle_sort,
)

log = logging.getLogger(__name__)

# (key, label, sortable)
COLUMNS: tuple[tuple[str, str, bool], ...] = (
    ("date", "Date", True),
    ("revenue", "Revenue", True),
    ("netIncome", "Net Income", True),
    ("grossProfit", "Gross Profit", False),
    ("eps", "EPS (Earnings Per Share)", False),
    ("operatingIncome", "Operating Income", False),
)


@dataclass
class AppState:
    """Loaded rows plus the user's current filters and sort.

    ``visible`` holds the filtered rows in load order; sorting is applied
    when rows are read so that changing the sort never refilters.

    Route handlers run in a threadpool, so every read and mutation holds
    ``_lock``; ``visible`` always equals ``apply_filters(records, criteria)``.
    """

    symbol: str
    records: list[IncomeStatement] = field(default_factory=list)
    criteria: FilterCriteria = field(default_factory=FilterCriteria)
    sort: SortSpec = field(default_factory=SortSpec)
    visible: list[IncomeStatement] = field(default_factory=list)
    bounds: FilterBoundsHint = field(default_factory=FilterBoundsHint)
    _lock: threading.RLock = field(
        default_factory=threading.RLock, repr=False, compare=False
    )

    def load(self, records: Iterable[IncomeStatement]) -> None:
        with self._lock:
            self.records = list(records)
            self.bounds = derive_bounds(self.records)
            self._refilter()

    def update_filters(self, patch: FilterCriteria) -> None:
        """Merge the bounds explicitly present in ``patch`` into the criteria."""
        changes = {name: getattr(patch, name) for name in patch.model_fields_set}
        with self._lock:
            self.criteria = self.criteria.model_copy(update=changes)
            self._refilter()

    def reset_filters(self) -> None:
        with self._lock:
            self.criteria = FilterCriteria()
            self.visible = list(self.records)

    def select_sort(self, field_name: SortField) -> None:
        with self._lock:
            self.sort = toggle_sort(self.sort, field_name)
            log.debug(
                "state.sort field=%s direction=%s",
                self.sort.field,
                self.sort.direction,
            )

    def rows(self) -> list[IncomeStatement]:
        with self._lock:
            return sort_records(self.visible, self.sort)

    def view(self) -> StatementView:
        with self._lock:
            columns = [
                Column(
                    key=key,
                    label=label,
                    sortable=sortable,
                    indicator=sort_indicator(self.sort, key) if sortable else "",
                )
                for key, label, sortable in COLUMNS
            ]
            return StatementView(
                symbol=self.symbol,
                columns=columns,
                filters=self.criteria,
                sort=self.sort,
                total=len(self.records),
                rows=self.rows(),
            )

    def _refilter(self) -> None:
        # caller holds _lock
        self.visible = apply_filters(self.records, self.criteria)
        log.debug(
            "state.refilter symbol=%s visible=%s total=%s unfiltered=%s",
            self.symbol,
            len(self.visible),
            len(self.records),
            self.criteria.is_empty(),
        )
