from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Path, Request
from fastapi.concurrency import run_in_threadpool

from income_explorer.config import FMP_SYMBOL
from income_explorer.schemas.statement import (
    SORT_FIELD_PATTERN,
    FilterBoundsHint,
    FilterCriteria,
)
from income_explorer.schemas.view import StatementView
from income_explorer.services.loader import load_statements
from income_explorer.services.state import AppState


@asynccontextmanager
async def lifespan(app: FastAPI):
    state = AppState(symbol=FMP_SYMBOL)
    await run_in_threadpool(load_statements, state)
    app.state.statements = state
    yield


app = FastAPI(title="Income Statement Explorer", lifespan=lifespan)


def get_state(request: Request) -> AppState:
    return request.app.state.statements


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/statements", response_model=StatementView)
def statements(state: AppState = Depends(get_state)):
    return state.view()


@app.get("/filters/options", response_model=FilterBoundsHint)
def filter_options(state: AppState = Depends(get_state)):
    return state.bounds


@app.patch("/filters", response_model=StatementView)
def update_filters(patch: FilterCriteria, state: AppState = Depends(get_state)):
    state.update_filters(patch)
    return state.view()


@app.post("/filters/reset", response_model=StatementView)
def reset_filters(state: AppState = Depends(get_state)):
    state.reset_filters()
    return state.view()


@app.post("/sort/{field}", response_model=StatementView)
def select_sort(
    field: str = Path(..., pattern=SORT_FIELD_PATTERN),
    state: AppState = Depends(get_state),
):
    state.select_sort(field)
    return state.view()
