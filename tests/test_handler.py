import asyncio
from datetime import datetime
from decimal import Decimal
from typing import Any

import httpx

from bitget_grid.config.grid import GridConfig
from bitget_grid.engine.grid import GridEngine
from bitget_grid.engine.handler import FAILURE_MESSAGE, handle_grid_invocation, run_grid_pass
from bitget_grid.exchange import BitgetApiError


class _ScriptedClient:
    def __init__(
        self,
        *,
        prices: dict[str, str],
        failing_ticker: set[str] | None = None,
        failing_orders: set[str] | None = None,
    ) -> None:
        self.prices = prices
        self.failing_ticker = failing_ticker or set()
        self.failing_orders = failing_orders or set()
        self.ticker_calls: list[str] = []
        self.orders: list[tuple[str, str]] = []

    async def get_ticker(self, symbol: str) -> Decimal:
        self.ticker_calls.append(symbol)
        if symbol in self.failing_ticker:
            request = httpx.Request("GET", "https://api.bitget.com/api/spot/v1/market/ticker")
            raise httpx.ConnectError("connection refused", request=request)
        return Decimal(self.prices[symbol])

    async def place_order(
        self,
        symbol: str,
        side: str,
        price: Decimal,
        size: Decimal,
    ) -> dict[str, Any]:
        if symbol in self.failing_orders:
            raise BitgetApiError(status_code=400, payload={"msg": "Insufficient balance"})
        self.orders.append((symbol, side))
        return {"code": "00000"}


def _engine(client: _ScriptedClient, symbols: tuple[str, ...]) -> GridEngine:
    return GridEngine(client=client, config=GridConfig(symbols=symbols))


def test_run_grid_pass_collects_logs_in_symbol_order() -> None:
    client = _ScriptedClient(prices={"BTCUSDT": "100", "ETHUSDT": "2000"})
    engine = _engine(client, ("ETHUSDT", "BTCUSDT"))

    result = asyncio.run(run_grid_pass(engine))

    assert result.logs == ["Bought ETHUSDT @ 2000", "Bought BTCUSDT @ 100"]
    assert client.ticker_calls == ["ETHUSDT", "BTCUSDT"]


def test_success_response_shape() -> None:
    client = _ScriptedClient(prices={"BTCUSDT": "100", "ETHUSDT": "2000"})
    engine = _engine(client, ("BTCUSDT", "ETHUSDT"))

    status, body = asyncio.run(handle_grid_invocation(engine))

    assert status == 200
    assert body["success"] is True
    assert body["logs"] == ["Bought BTCUSDT @ 100", "Bought ETHUSDT @ 2000"]
    assert body["timestamp"].endswith("Z")
    datetime.fromisoformat(body["timestamp"].replace("Z", "+00:00"))


def test_ticker_failure_returns_500_without_orders() -> None:
    client = _ScriptedClient(prices={}, failing_ticker={"BTCUSDT"})
    engine = _engine(client, ("BTCUSDT",))

    status, body = asyncio.run(handle_grid_invocation(engine))

    assert status == 500
    assert body == {"error": FAILURE_MESSAGE, "details": "connection refused"}
    assert client.orders == []


def test_second_symbol_failure_fails_whole_pass() -> None:
    client = _ScriptedClient(
        prices={"BTCUSDT": "100", "ETHUSDT": "2000", "SOLUSDT": "20"},
        failing_orders={"ETHUSDT"},
    )
    engine = _engine(client, ("BTCUSDT", "ETHUSDT", "SOLUSDT"))

    status, body = asyncio.run(handle_grid_invocation(engine))

    assert status == 500
    assert body["error"] == FAILURE_MESSAGE
    assert "Insufficient balance" in body["details"]
    assert "success" not in body
    assert client.orders == [("BTCUSDT", "buy")]
    assert "SOLUSDT" not in client.ticker_calls
    assert engine.store.get("BTCUSDT").last_buy_price == Decimal("100")
