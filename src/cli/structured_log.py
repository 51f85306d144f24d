"""
Structured JSON event logger.

Emits one JSON object per line to stderr so client activity (token refreshes,
API calls, trade builds, errors) can be parsed by log aggregators.
"""

from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from typing import Any


class StructuredEventLogger:
    """Emit structured JSON events to a stream (stderr by default)."""

    def __init__(
        self,
        *,
        enabled: bool = True,
        stream: Any = None,
    ) -> None:
        self._enabled = enabled
        self._stream = stream or sys.stderr

    def _emit(self, event_type: str, **fields: Any) -> dict:
        record = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "event": event_type,
            **fields,
        }
        if self._enabled:
            self._stream.write(json.dumps(record) + "\n")
            self._stream.flush()
        return record

    def token_refreshed(self, expires_in: int) -> dict:
        return self._emit("token_refreshed", expires_in=expires_in)

    def request_complete(self, path: str, status: int, latency_ms: int) -> dict:
        return self._emit(
            "request_complete",
            path=path,
            status=status,
            latency_ms=latency_ms,
        )

    def trades_built(self, account_id: str, trades: int) -> dict:
        return self._emit("trades_built", account_id=account_id, trades=trades)

    def error(self, message: str, detail: str = "") -> dict:
        return self._emit("error", message=message, detail=detail)
