"""Pytest fixtures: raw broker order payloads for deterministic tests."""

from typing import Any

import pytest


def _execution(leg_id: int, qty: float, price: float, time: str) -> dict[str, Any]:
    return {"legId": leg_id, "quantity": qty, "price": price, "time": time}


def _leg(leg_id: int, symbol: str, instruction: str, qty: float) -> dict[str, Any]:
    return {
        "legId": leg_id,
        "instrument": {"symbol": symbol, "assetType": "OPTION" if "_" in symbol else "EQUITY"},
        "instruction": instruction,
        "quantity": qty,
    }


@pytest.fixture
def filled_call_order() -> dict[str, Any]:
    """Single-leg buy, filled in two executions: 10 @ 100, 5 @ 103."""
    return {
        "orderId": 1001,
        "status": "FILLED",
        "price": 101.0,
        "filledQuantity": 15,
        "closeTime": "2018-06-15T14:35:00+0000",
        "orderLegCollection": [_leg(1, "ANET_061518C275", "BUY_TO_OPEN", 15)],
        "orderActivityCollection": [
            {"activityType": "EXECUTION", "executionLegs": [_execution(1, 10, 100.0, "2018-06-15T14:31:00+0000")]},
            {"activityType": "EXECUTION", "executionLegs": [_execution(1, 5, 103.0, "2018-06-15T14:34:00+0000")]},
        ],
    }


@pytest.fixture
def vertical_spread_order() -> dict[str, Any]:
    """Two-leg debit spread, no closeTime (traded comes from the latest execution)."""
    return {
        "orderId": 2002,
        "status": "FILLED",
        "price": 2.5,
        "filledQuantity": 2,
        "orderLegCollection": [
            _leg(1, "SPY_121820C350", "BUY_TO_OPEN", 2),
            _leg(2, "SPY_121820C355.5", "SELL_TO_OPEN", 2),
        ],
        "orderActivityCollection": [
            {
                "activityType": "EXECUTION",
                "executionLegs": [
                    _execution(1, 2, 6.0, "2020-11-02T15:00:00+0000"),
                    _execution(2, 2, 3.5, "2020-11-02T15:00:01+0000"),
                ],
            }
        ],
    }


@pytest.fixture
def bracket_order() -> dict[str, Any]:
    """Working parent with one filled stop child and one cancelled target child."""
    return {
        "orderId": 3000,
        "status": "WORKING",
        "price": 50.0,
        "filledQuantity": 0,
        "orderLegCollection": [_leg(1, "AAPL", "BUY", 100)],
        "orderActivityCollection": [],
        "childOrderStrategies": [
            {
                "orderId": 3001,
                "status": "FILLED",
                "price": 48.0,
                "filledQuantity": 100,
                "closeTime": "2021-03-01T16:00:00+0000",
                "orderLegCollection": [_leg(1, "AAPL", "SELL", 100)],
                "orderActivityCollection": [
                    {"executionLegs": [_execution(1, 100, 47.9, "2021-03-01T15:59:00+0000")]}
                ],
            },
            {
                "orderId": 3002,
                "status": "CANCELED",
                "price": 55.0,
                "filledQuantity": 0,
                "orderLegCollection": [_leg(1, "AAPL", "SELL", 100)],
                "orderActivityCollection": [],
            },
        ],
    }


@pytest.fixture
def filled_without_executions() -> dict[str, Any]:
    """Status FILLED but the broker returned no execution legs."""
    return {
        "orderId": 4004,
        "status": "FILLED",
        "price": 10.0,
        "filledQuantity": 1,
        "closeTime": "2022-01-03T15:00:00+0000",
        "orderLegCollection": [_leg(1, "MSFT", "BUY", 1)],
        "orderActivityCollection": [{"activityType": "EXECUTION", "executionLegs": []}],
    }
