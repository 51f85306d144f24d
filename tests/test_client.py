"""Tests for TdaClient with a mocked requests.Session. No network calls."""

from datetime import date, datetime, timezone
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

from client.api import OptionChainRequest, StaticToken, TdaApiError, TdaClient
from tda_core.contracts import ParseError


def _response(payload: Any, status: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload
    resp.text = str(payload)
    return resp


@pytest.fixture
def session() -> MagicMock:
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(session: MagicMock) -> TdaClient:
    return TdaClient(StaticToken("tok-123"), host="https://api.example.com/", session=session)


def _call(session: MagicMock) -> tuple[str, dict[str, Any]]:
    args, kwargs = session.get.call_args
    return args[0], kwargs


class TestRequest:
    def test_bearer_header_and_url(self, client: TdaClient, session: MagicMock) -> None:
        session.get.return_value = _response([])
        client.get_accounts()
        url, kwargs = _call(session)
        assert url == "https://api.example.com/v1/accounts"
        assert kwargs["headers"] == {"Authorization": "Bearer tok-123"}
        assert kwargs["timeout"] == 10.0

    def test_http_error_raises(self, client: TdaClient, session: MagicMock) -> None:
        session.get.return_value = _response({"error": "nope"}, status=401)
        with pytest.raises(TdaApiError) as exc_info:
            client.get_accounts()
        assert exc_info.value.status == 401

    def test_network_error_raises(self, client: TdaClient, session: MagicMock) -> None:
        session.get.side_effect = requests.ConnectionError("down")
        with pytest.raises(TdaApiError, match="HTTP error"):
            client.get_accounts()

    def test_non_json_raises(self, client: TdaClient, session: MagicMock) -> None:
        resp = _response(None)
        resp.json.side_effect = ValueError("no json")
        session.get.return_value = resp
        with pytest.raises(TdaApiError, match="non-JSON"):
            client.get_accounts()

    def test_on_request_callback(self, session: MagicMock) -> None:
        seen = []
        c = TdaClient(StaticToken("t"), session=session, on_request=lambda *a: seen.append(a))
        session.get.return_value = _response([])
        c.get_accounts()
        assert seen[0][0] == "/v1/accounts"
        assert seen[0][1] == 200

    def test_context_manager_closes_session(self, session: MagicMock) -> None:
        with TdaClient(StaticToken("t"), session=session):
            pass
        session.close.assert_called_once()


class TestQuotes:
    def test_symbols_converted_and_results_rekeyed(self, client: TdaClient, session: MagicMock) -> None:
        session.get.return_value = _response(
            {"ANET_061518C275": {"bidPrice": 4.1}, "AAPL": {"bidPrice": 150.0}}
        )
        out = client.get_quotes(["ANET  180615C00275000", "AAPL"])
        url, kwargs = _call(session)
        assert url.endswith("/v1/marketdata/quotes")
        assert kwargs["params"] == {"symbol": "ANET_061518C275,AAPL"}
        assert out == {"ANET  180615C00275000": {"bidPrice": 4.1}, "AAPL": {"bidPrice": 150.0}}

    def test_single_symbol(self, client: TdaClient, session: MagicMock) -> None:
        session.get.return_value = _response({"SPY": {"lastPrice": 400.0}})
        assert client.get_quotes("SPY") == {"SPY": {"lastPrice": 400.0}}


class TestOptionChain:
    def test_default_params(self) -> None:
        assert OptionChainRequest(symbol="ANET").to_params() == {
            "symbol": "ANET",
            "range": "ALL",
            "includeQuotes": "TRUE",
            "optionType": "S",
        }

    def test_all_params(self) -> None:
        params = OptionChainRequest(
            symbol="ANET",
            from_date=date(2018, 6, 1),
            to_date=datetime(2018, 7, 1, tzinfo=timezone.utc),
            include_nonstandard=True,
            contract_type="CALL",
            near_the_money=True,
        ).to_params()
        assert params["range"] == "NTM"
        assert params["optionType"] == "ALL"
        assert params["contractType"] == "CALL"
        assert params["fromDate"] == "2018-06-01"
        assert params["toDate"] == "2018-07-01T00:00:00+00:00"

    def test_symbols_normalized(self, client: TdaClient, session: MagicMock) -> None:
        session.get.return_value = _response(
            {"callExpDateMap": {"2018-06-15:4": {"275.0": [{"symbol": "ANET_061518C275"}]}}}
        )
        chain = client.get_option_chain(OptionChainRequest(symbol="ANET"))
        assert chain["callExpDateMap"]["2018-06-15:4"]["275.0"][0]["symbol"] == "ANET  180615C00275000"


class TestOrdersAndTrades:
    def test_order_params(self, client: TdaClient, session: MagicMock) -> None:
        session.get.return_value = _response([])
        client.get_orders(
            "123",
            from_date=datetime(2024, 1, 2, 9, 30),
            to_date=date(2024, 1, 31),
            status="FILLED",
        )
        url, kwargs = _call(session)
        assert url.endswith("/v1/accounts/123/orders")
        assert kwargs["params"] == {
            "fromEnteredTime": "2024-01-02",
            "toEnteredTime": "2024-01-31",
            "status": "FILLED",
        }

    def test_no_order_params(self, client: TdaClient, session: MagicMock) -> None:
        session.get.return_value = _response([])
        client.get_orders("123")
        assert _call(session)[1]["params"] is None

    def test_get_trades(
        self,
        client: TdaClient,
        session: MagicMock,
        filled_call_order: dict[str, Any],
        filled_without_executions: dict[str, Any],
    ) -> None:
        session.get.return_value = _response([filled_call_order, filled_without_executions])
        trades = client.get_trades("123")
        assert [t.id for t in trades] == [1001]
        assert trades[0].legs[0].symbol == "ANET  180615C00275000"

    def test_get_trades_propagates_parse_error(
        self, client: TdaClient, session: MagicMock, filled_call_order: dict[str, Any]
    ) -> None:
        filled_call_order["orderLegCollection"][0]["instrument"]["symbol"] = "bad symbol"
        session.get.return_value = _response([filled_call_order])
        with pytest.raises(ParseError):
            client.get_trades("123")

    def test_accounts_fields(self, client: TdaClient, session: MagicMock) -> None:
        session.get.return_value = _response([])
        client.get_accounts(fields=["positions", "orders"])
        assert _call(session)[1]["params"] == {"fields": "positions,orders"}
