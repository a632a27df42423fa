import logging
import threading

from income_explorer.schemas.statement import FilterCriteria, IncomeStatement, SortSpec
from income_explorer.services.state import AppState


def _state() -> AppState:
    state = AppState(symbol="AAPL")
    state.load(
        [
            IncomeStatement(date="2021-09-25", revenue=300, netIncome=30),
            IncomeStatement(date="2020-09-26", revenue=200, netIncome=-20),
            IncomeStatement(date="2019-09-28", revenue=100, netIncome=10),
        ]
    )
    return state


def test_update_filters_merges_only_supplied_bounds():
    state = _state()
    state.update_filters(FilterCriteria(startYear=2020))
    state.update_filters(FilterCriteria.model_validate({"minRevenue": "250"}))

    assert state.criteria.start_year == 2020
    assert state.criteria.min_revenue == 250
    assert [r.date for r in state.visible] == ["2021-09-25"]


def test_unparsable_patch_clears_the_bound():
    state = _state()
    state.update_filters(FilterCriteria(minNetIncome=0))
    assert len(state.visible) == 2

    state.update_filters(FilterCriteria.model_validate({"minNetIncome": "oops"}))
    assert state.criteria.min_net_income is None
    assert len(state.visible) == 3


def test_reset_restores_everything_after_any_interaction():
    state = _state()
    state.update_filters(FilterCriteria(startYear=2021, maxNetIncome=0))
    state.select_sort("revenue")
    assert state.visible == []

    state.reset_filters()

    assert state.criteria.is_empty()
    assert state.visible == state.records
    assert state.sort == SortSpec(field="revenue", direction="ascending")


def test_rows_sorted_from_visible_subset():
    state = _state()
    state.update_filters(FilterCriteria(minRevenue=150))
    state.select_sort("netIncome")
    assert [r.net_income for r in state.rows()] == [-20, 30]

    state.select_sort("netIncome")
    assert [r.net_income for r in state.rows()] == [30, -20]
    # sorting never reorders the stored filtered rows
    assert [r.date for r in state.visible] == ["2021-09-25", "2020-09-26"]


def test_view_columns_and_indicators():
    state = _state()
    state.select_sort("date")
    state.select_sort("date")
    view = state.view()

    by_key = {c.key: c for c in view.columns}
    assert by_key["date"].indicator == "↓"
    assert by_key["revenue"].indicator == ""
    assert not by_key["eps"].sortable
    assert view.total == 3
    assert [r.date for r in view.rows] == ["2021-09-25", "2020-09-26", "2019-09-28"]


def test_reset_waits_for_an_in_flight_update(monkeypatch):
    from income_explorer.services import state as state_mod

    state = _state()
    entered = threading.Event()
    release = threading.Event()
    real_apply = state_mod.apply_filters

    def slow_apply(records, criteria):
        out = real_apply(records, criteria)
        if criteria.min_revenue is not None:
            entered.set()
            release.wait(timeout=5)
        return out

    monkeypatch.setattr(state_mod, "apply_filters", slow_apply)

    updater = threading.Thread(
        target=state.update_filters, args=(FilterCriteria(minRevenue=250),)
    )
    resetter = threading.Thread(target=state.reset_filters)
    updater.start()
    assert entered.wait(timeout=5)
    resetter.start()
    resetter.join(timeout=0.2)
    # the reset is blocked behind the update still holding the state
    assert resetter.is_alive()

    release.set()
    updater.join(timeout=5)
    resetter.join(timeout=5)

    assert state.criteria.is_empty()
    assert state.visible == state.records
    assert state.visible == real_apply(state.records, state.criteria)


def test_refilter_logs_whether_any_bound_is_set(caplog):
    state = _state()
    with caplog.at_level(logging.DEBUG, logger="income_explorer.services.state"):
        state.update_filters(FilterCriteria(startYear=2020))
        state.update_filters(FilterCriteria.model_validate({"startYear": ""}))

    lines = [r.getMessage() for r in caplog.records if "state.refilter" in r.getMessage()]
    assert lines[0].endswith("unfiltered=False")
    assert lines[1].endswith("unfiltered=True")
