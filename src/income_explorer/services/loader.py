import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from income_explorer.config import (
    CONNECT_TIMEOUT,
    FMP_API_KEY,
    FMP_BASE_URL,
    FMP_PERIOD,
    POOL_TIMEOUT,
    READ_TIMEOUT,
    USER_AGENT,
    WRITE_TIMEOUT,
)
from income_explorer.schemas.statement import IncomeStatement
from income_explorer.services.state import AppState

log = logging.getLogger(__name__)


class MissingApiKey(Exception): ...


class StatementLoadError(Exception): ...


def statement_url(symbol: str) -> str:
    return f"{FMP_BASE_URL.rstrip('/')}/income-statement/{symbol.upper()}"


def _mk_client() -> httpx.Client:
    timeout = httpx.Timeout(
        connect=CONNECT_TIMEOUT,
        read=READ_TIMEOUT,
        write=WRITE_TIMEOUT,
        pool=POOL_TIMEOUT,
    )
    return httpx.Client(
        follow_redirects=True, timeout=timeout, headers={"User-Agent": USER_AGENT}
    )


def _parse_payload(payload: object) -> list[IncomeStatement]:
    # FMP signals bad keys and quota problems with a JSON object, not a status
    if isinstance(payload, dict):
        msg = payload.get("Error Message") or payload.get("message")
        raise StatementLoadError(f"FMP error: {msg or 'unexpected object payload'}")
    if not isinstance(payload, list):
        raise StatementLoadError(
            f"Expected a JSON array, got {type(payload).__name__}"
        )
    try:
        return [IncomeStatement.model_validate(item) for item in payload]
    except ValidationError as e:
        raise StatementLoadError(f"Malformed income statement: {e}") from e


def fetch_income_statements(
    symbol: str,
    api_key: Optional[str] = None,
    client: Optional[httpx.Client] = None,
) -> list[IncomeStatement]:
    """Fetch the annual income statements for ``symbol``.

    Makes exactly one GET; there is no retry.

    Raises:
        MissingApiKey: no key was given and FMP_API_KEY is unset. No request is made.
        StatementLoadError: the body is not JSON or not a list of statements.
        httpx.HTTPError: network failure or non-2xx status.
    """
    key = api_key or FMP_API_KEY
    if not key:
        raise MissingApiKey("FMP_API_KEY is not set")

    close_client = False
    if client is None:
        client = _mk_client()
        close_client = True

    try:
        resp = client.get(
            statement_url(symbol), params={"period": FMP_PERIOD, "apikey": key}
        )
        resp.raise_for_status()
        try:
            payload = resp.json()
        except ValueError as e:
            raise StatementLoadError("Response body is not JSON") from e

        records = _parse_payload(payload)
        log.info("loader.fetched symbol=%s rows=%s", symbol.upper(), len(records))
        return records
    finally:
        if close_client:
            client.close()


def load_statements(
    state: AppState,
    api_key: Optional[str] = None,
    client: Optional[httpx.Client] = None,
) -> bool:
    """Fill ``state`` from the API. Failures are logged and leave ``state`` as it was."""
    try:
        records = fetch_income_statements(state.symbol, api_key=api_key, client=client)
    except MissingApiKey as e:
        log.error("loader.missing_api_key symbol=%s err=%s", state.symbol, e)
        return False
    except httpx.HTTPStatusError as e:
        log.error(
            "loader.upstream_error symbol=%s status=%s",
            state.symbol,
            e.response.status_code,
        )
        return False
    except (httpx.RequestError, StatementLoadError):
        log.exception("loader.fetch_failed symbol=%s", state.symbol)
        return False

    state.load(records)
    return True
