import os

from dotenv import find_dotenv, load_dotenv

load_dotenv(find_dotenv(usecwd=True), override=False)


def _float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except ValueError:
        return default


FMP_API_KEY = os.getenv("FMP_API_KEY") or None
FMP_BASE_URL = os.getenv("FMP_BASE_URL", "https://financialmodelingprep.com/api/v3")
FMP_SYMBOL = os.getenv("FMP_SYMBOL", "AAPL").upper()
FMP_PERIOD = os.getenv("FMP_PERIOD", "annual")

CONNECT_TIMEOUT = _float("FMP_CONNECT_TIMEOUT", 5)
READ_TIMEOUT = _float("FMP_READ_TIMEOUT", 25)
WRITE_TIMEOUT = _float("FMP_WRITE_TIMEOUT", 10)
POOL_TIMEOUT = _float("FMP_POOL_TIMEOUT", 5)

USER_AGENT = os.getenv("USER_AGENT", "income-explorer (+contact@example.com)")
