"""
OAuth refresh-token authentication.

The access token is short-lived (30 minutes). TokenRefresher owns the only
mutable token cell: one synchronous refresh on start(), then a daemon thread
refreshes ahead of expiry until stop().
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

import requests

logger = logging.getLogger("tda.auth")

DEFAULT_HOST = "https://api.tdameritrade.com"
TOKEN_PATH = "/v1/oauth2/token"
REFRESH_MARGIN_S = 300
MIN_REFRESH_INTERVAL_S = 60


class TdaAuthError(RuntimeError):
    """Raised when the refresh-token grant fails or no token is available."""


@dataclass(frozen=True)
class AuthData:
    client_id: str
    refresh_token: str


@dataclass(frozen=True)
class AccessToken:
    token: str
    expires_in: int = 1800
    issued_at: float = 0.0


def _post_refresh(
    http: requests.Session, auth: AuthData, host: str, timeout: float
) -> requests.Response:
    form = {
        "grant_type": "refresh_token",
        "refresh_token": auth.refresh_token,
        "client_id": auth.client_id,
    }
    try:
        return http.post(f"{host.rstrip('/')}{TOKEN_PATH}", data=form, timeout=timeout)
    except requests.RequestException as exc:
        raise TdaAuthError(f"Network error during token refresh: {exc}") from exc


def refresh_access_token(
    auth: AuthData,
    *,
    host: str = DEFAULT_HOST,
    session: requests.Session | None = None,
    timeout: float = 10.0,
) -> AccessToken:
    """Exchange the refresh token for a new access token."""
    if session is None:
        with requests.Session() as http:
            resp = _post_refresh(http, auth, host, timeout)
    else:
        resp = _post_refresh(session, auth, host, timeout)

    if resp.status_code != 200:
        raise TdaAuthError(f"Failed to refresh token (HTTP {resp.status_code}): {resp.text}")

    try:
        data = resp.json()
    except ValueError as exc:
        raise TdaAuthError("Malformed refresh response: not valid JSON.") from exc

    access_token = data.get("access_token")
    if not access_token:
        raise TdaAuthError("Malformed refresh response: missing access_token.")

    expires_in = int(data.get("expires_in", 1800))
    logger.info("Access token refreshed; TTL=%ss", expires_in)
    return AccessToken(token=access_token, expires_in=expires_in, issued_at=time.time())


class TokenRefresher:
    """
    Background task keeping a fresh access token.

    Parameters
    ----------
    auth:
        Client id and long-lived refresh token.
    refresh_interval:
        Seconds between refreshes. Defaults to the token TTL minus a 5-minute margin.
    on_refresh:
        Optional callback invoked with each new AccessToken.
    """

    def __init__(
        self,
        auth: AuthData,
        *,
        host: str = DEFAULT_HOST,
        session: requests.Session | None = None,
        timeout: float = 10.0,
        refresh_interval: float | None = None,
        on_refresh: Callable[[AccessToken], None] | None = None,
    ) -> None:
        self._auth = auth
        self._host = host
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._timeout = timeout
        self._refresh_interval = refresh_interval
        self._on_refresh = on_refresh
        self._lock = threading.Lock()
        self._token: AccessToken | None = None
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def access_token(self) -> str:
        with self._lock:
            token = self._token
        if token is None:
            raise TdaAuthError("No access token; call refresh() or start() first.")
        return token.token

    def interval(self) -> float:
        """Seconds until the next scheduled refresh."""
        if self._refresh_interval is not None:
            return self._refresh_interval
        with self._lock:
            expires_in = self._token.expires_in if self._token else 0
        return max(MIN_REFRESH_INTERVAL_S, expires_in - REFRESH_MARGIN_S)

    def refresh(self) -> AccessToken:
        token = refresh_access_token(
            self._auth, host=self._host, session=self._session, timeout=self._timeout
        )
        with self._lock:
            self._token = token
        if self._on_refresh is not None:
            self._on_refresh(token)
        return token

    def _run(self) -> None:
        while not self._stop.wait(self.interval()):
            try:
                self.refresh()
            except TdaAuthError as exc:
                logger.warning("Background token refresh failed: %s", exc)

    def start(self) -> "TokenRefresher":
        """Refresh once synchronously, then keep refreshing in a daemon thread."""
        try:
            self.refresh()
        except TdaAuthError:
            self._close_session()
            raise
        if self._thread is None or not self._thread.is_alive():
            self._stop.clear()
            self._thread = threading.Thread(target=self._run, name="tda-token-refresh", daemon=True)
            self._thread.start()
        return self

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None
        self._close_session()

    def _close_session(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "TokenRefresher":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
