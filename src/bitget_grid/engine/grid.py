from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict
from decimal import Decimal
from typing import Any, Protocol

from bitget_grid.config.grid import GridConfig
from bitget_grid.types import Side, SymbolState

logger = logging.getLogger("bitget_grid.grid")


class MarketClient(Protocol):
    async def get_ticker(self, symbol: str) -> Decimal: ...

    async def place_order(
        self,
        symbol: str,
        side: Side,
        price: Decimal,
        size: Decimal,
    ) -> dict[str, Any]: ...


class GridStateStore:
    """Per-symbol grid state, shared by every invocation in the process."""

    def __init__(self) -> None:
        self._states: dict[str, SymbolState] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def get(self, symbol: str) -> SymbolState:
        return self._states.get(symbol) or SymbolState()

    def record_buy(self, symbol: str, price: Decimal) -> None:
        self._states[symbol] = SymbolState(last_buy_price=price)

    def flag(self, symbol: str, reason: str) -> None:
        state = self.get(symbol)
        state.needs_reconciliation = True
        state.reconciliation_reason = reason
        self._states[symbol] = state

    def reset(self, symbol: str) -> None:
        self._states.pop(symbol, None)

    def lock(self, symbol: str) -> asyncio.Lock:
        lock = self._locks.get(symbol)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[symbol] = lock
        return lock

    def snapshot(self) -> dict[str, dict[str, Any]]:
        out: dict[str, dict[str, Any]] = {}
        for symbol, state in self._states.items():
            row = asdict(state)
            if state.last_buy_price is not None:
                row["last_buy_price"] = format(state.last_buy_price, "f")
            out[symbol] = row
        return out


def price_move(*, price: Decimal, reference: Decimal) -> Decimal:
    return (price - reference) / reference


class GridEngine:
    def __init__(
        self,
        *,
        client: MarketClient,
        config: GridConfig | None = None,
        store: GridStateStore | None = None,
    ) -> None:
        self._client = client
        self._config = config if config is not None else GridConfig()
        self._store = store if store is not None else GridStateStore()

    @property
    def config(self) -> GridConfig:
        return self._config

    @property
    def store(self) -> GridStateStore:
        return self._store

    async def run_symbol(self, symbol: str) -> list[str]:
        async with self._store.lock(symbol):
            return await self._run_symbol_locked(symbol)

    async def _run_symbol_locked(self, symbol: str) -> list[str]:
        state = self._store.get(symbol)
        if state.needs_reconciliation:
            logger.warning(
                "symbol_skipped_needs_reconciliation",
                extra={"symbol": symbol},
            )
            return [f"Skipped {symbol}: needs manual reconciliation"]

        price = await self._client.get_ticker(symbol)
        lot = self._config.lot_size

        if state.last_buy_price is None:
            await self._place(symbol, "buy", price)
            self._store.record_buy(symbol, price)
            return [f"Bought {symbol} @ {_fmt(price)}"]

        last = state.last_buy_price
        if price_move(price=price, reference=last) < self._config.grid_spacing:
            logger.info("no_trade", extra={"symbol": symbol, "price": str(price)})
            return [f"No trade for {symbol}. Waiting..."]

        return await self._flip(symbol, price=price, last_buy_price=last, lot=lot)

    async def _flip(
        self,
        symbol: str,
        *,
        price: Decimal,
        last_buy_price: Decimal,
        lot: Decimal,
    ) -> list[str]:
        # Phase 1: sell. A failure here leaves the state untouched.
        await self._place(symbol, "sell", price)
        profit = (price - last_buy_price) * lot
        logs = [f"Sold {symbol} @ {_fmt(price)} | Profit: ${_fmt(profit)}"]

        # Phase 2: rebuy. A failure here leaves the exchange flat while the
        # state still says Holding; the symbol stays frozen until reset.
        try:
            await self._place(symbol, "buy", price)
        except Exception as e:
            reason = f"sold @ {_fmt(price)} but rebuy failed: {type(e).__name__}: {e}"
            self._store.flag(symbol, reason)
            logger.error(
                "grid_flip_incomplete",
                extra={"symbol": symbol, "price": str(price), "profit": str(profit)},
            )
            raise
        self._store.record_buy(symbol, price)
        logs.append(f"Re-bought {symbol} @ {_fmt(price)}")
        return logs

    async def _place(self, symbol: str, side: Side, price: Decimal) -> dict[str, Any]:
        size = self._config.lot_size
        result = await self._client.place_order(symbol, side, price, size)
        order_id = _order_id(result)
        logger.info(
            "order_placed",
            extra={
                "symbol": symbol,
                "side": side,
                "price": str(price),
                "size": str(size),
                "order_id": order_id,
            },
        )
        return result


def _fmt(value: Decimal) -> str:
    return format(value.normalize(), "f")


def _order_id(result: dict[str, Any]) -> str:
    data = result.get("data") if isinstance(result, dict) else None
    if isinstance(data, dict):
        return str(data.get("orderId", ""))
    return ""
