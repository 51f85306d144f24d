"""
TD Ameritrade REST client: quotes, option chains, order history, trades.

Thin wrapper over a bearer-token JSON GET. Symbols are converted between OCC and
broker form on the way out and back via tda_core; no retries.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Iterable, Protocol

import requests

from tda_core.contracts import Trade
from tda_core.marketdata import normalize_option_chain, quote_symbol_map, remap_quotes
from tda_core.trades import build_trades

from client.auth import DEFAULT_HOST

logger = logging.getLogger("tda.client")


class TdaApiError(RuntimeError):
    """Raised for network failures, HTTP errors, or non-JSON responses."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class TokenSource(Protocol):
    """Anything exposing a current bearer token (TokenRefresher, or a static holder in tests)."""

    @property
    def access_token(self) -> str:
        ...


@dataclass(frozen=True)
class StaticToken:
    """Fixed access token; for scripts that manage refresh themselves."""

    access_token: str


@dataclass(frozen=True)
class OptionChainRequest:
    symbol: str
    from_date: datetime | date | None = None
    to_date: datetime | date | None = None
    include_nonstandard: bool = False
    contract_type: str | None = None  # "CALL" | "PUT"
    near_the_money: bool = False

    def to_params(self) -> dict[str, str]:
        params = {
            "symbol": self.symbol,
            "range": "NTM" if self.near_the_money else "ALL",
            "includeQuotes": "TRUE",
            "optionType": "ALL" if self.include_nonstandard else "S",
        }
        if self.contract_type:
            params["contractType"] = self.contract_type
        if self.to_date:
            params["toDate"] = self.to_date.isoformat()
        if self.from_date:
            params["fromDate"] = self.from_date.isoformat()
        return params


def _day(value: datetime | date) -> str:
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


class TdaClient:
    """
    Market-data and account client.

    Uses a requests.Session; pass one in to share connection pooling or to mock in tests.
    """

    def __init__(
        self,
        auth: TokenSource,
        *,
        host: str = DEFAULT_HOST,
        timeout: float = 10.0,
        session: requests.Session | None = None,
        on_request: Callable[[str, int, int], None] | None = None,
    ) -> None:
        self._auth = auth
        self._host = host.rstrip("/")
        self._timeout = timeout
        self._http = session or requests.Session()
        self._on_request = on_request

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "TdaClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _get(self, path: str, params: dict[str, str] | None = None) -> Any:
        url = f"{self._host}{path}"
        headers = {"Authorization": f"Bearer {self._auth.access_token}"}
        started = time.monotonic()
        try:
            resp = self._http.get(url, params=params, headers=headers, timeout=self._timeout)
        except requests.RequestException as exc:
            raise TdaApiError(f"HTTP error calling {url}: {exc}") from exc
        latency_ms = int((time.monotonic() - started) * 1000)

        logger.debug("GET %s -> %s (%dms)", path, resp.status_code, latency_ms)
        if self._on_request is not None:
            self._on_request(path, resp.status_code, latency_ms)

        if resp.status_code >= 400:
            raise TdaApiError(
                f"GET {path} failed (HTTP {resp.status_code}): {resp.text}",
                status=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise TdaApiError(f"GET {path} returned non-JSON body", status=resp.status_code) from exc

    # ---------- market data ----------

    def get_quotes(self, symbols: str | Iterable[str]) -> dict[str, Any]:
        """Quotes keyed by the symbols the caller passed in (OCC or equity)."""
        symbol_map = quote_symbol_map(symbols)
        results = self._get("/v1/marketdata/quotes", {"symbol": ",".join(symbol_map)})
        return remap_quotes(results or {}, symbol_map)

    def get_option_chain(self, options: OptionChainRequest) -> dict[str, Any]:
        """Option chain with every contract symbol rewritten to OCC form."""
        chain = self._get("/v1/marketdata/chains", options.to_params())
        return normalize_option_chain(chain)

    # ---------- account ----------

    def get_accounts(self, fields: Iterable[str] | None = None) -> list[dict[str, Any]]:
        params = {"fields": ",".join(fields)} if fields else None
        return self._get("/v1/accounts", params)

    def get_orders(
        self,
        account_id: str,
        *,
        from_date: datetime | date | None = None,
        to_date: datetime | date | None = None,
        status: str | None = None,
    ) -> list[dict[str, Any]]:
        """Raw order history for an account, including nested child orders."""
        params: dict[str, str] = {}
        if from_date:
            params["fromEnteredTime"] = _day(from_date)
        if to_date:
            params["toEnteredTime"] = _day(to_date)
        if status:
            params["status"] = status
        return self._get(f"/v1/accounts/{account_id}/orders", params or None)

    def get_trades(
        self,
        account_id: str,
        *,
        from_date: datetime | date | None = None,
        to_date: datetime | date | None = None,
    ) -> list[Trade]:
        """Executed orders as Trade records. A malformed leg symbol raises ParseError."""
        orders = self.get_orders(account_id, from_date=from_date, to_date=to_date)
        return build_trades(orders or [])
