from __future__ import annotations

import json
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, cast

import httpx

from bitget_grid.exchange.signing import build_auth_headers
from bitget_grid.types import OrderRequest, Side

logger = logging.getLogger("bitget_grid.exchange")

TICKER_PATH = "/api/spot/v1/market/ticker"
ORDERS_PATH = "/api/spot/v1/trade/orders"


class BitgetError(RuntimeError):
    pass


class BitgetApiError(BitgetError):
    def __init__(self, *, status_code: int, payload: Any):
        super().__init__(f"Bitget API error: status={status_code} payload={payload!r}")
        self.status_code = status_code
        self.payload = payload


class BitgetResponseError(BitgetError):
    pass


def _normalize_value(value: Any) -> str:
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def build_order_body(order: OrderRequest) -> dict[str, str]:
    return {
        "symbol": order.symbol,
        "side": order.side,
        "orderType": order.order_type,
        "force": order.force,
        "price": _normalize_value(order.price),
        "size": _normalize_value(order.size),
    }


def _parse_close_price(payload: Any) -> Decimal:
    try:
        raw = payload["data"]["close"]
    except (KeyError, TypeError) as e:
        raise BitgetResponseError(f"ticker response missing data.close: {payload!r}") from e
    if raw is None or isinstance(raw, bool):
        raise BitgetResponseError(f"ticker close price is not a number: {raw!r}")
    try:
        price = Decimal(str(raw))
    except InvalidOperation as e:
        raise BitgetResponseError(f"ticker close price is not a number: {raw!r}") from e
    if not price.is_finite():
        raise BitgetResponseError(f"ticker close price is not a number: {raw!r}")
    if price <= 0:
        raise BitgetResponseError(f"ticker close price is not positive: {raw!r}")
    return price


class BitgetSpotClient:
    def __init__(
        self,
        *,
        api_key: str,
        api_secret: str,
        passphrase: str,
        base_url: str = "https://api.bitget.com",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._api_secret = api_secret
        self._passphrase = passphrase
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_ticker(self, symbol: str) -> Decimal:
        response = await self._client.get(TICKER_PATH, params={"symbol": symbol})
        payload = self._decode(response)
        return _parse_close_price(payload)

    async def place_order(
        self,
        symbol: str,
        side: Side,
        price: Decimal,
        size: Decimal,
    ) -> dict[str, Any]:
        order = OrderRequest(symbol=symbol, side=side, price=price, size=size)
        # Serialise once: the signature must cover exactly the bytes sent.
        body = json.dumps(build_order_body(order), separators=(",", ":"))
        headers = build_auth_headers(
            api_key=self._api_key,
            api_secret=self._api_secret,
            passphrase=self._passphrase,
            method="POST",
            path=ORDERS_PATH,
            body=body,
        )
        response = await self._client.post(ORDERS_PATH, content=body, headers=headers)
        payload = self._decode(response)
        logger.debug(
            "order_response",
            extra={"symbol": symbol, "side": side, "price": str(price), "size": str(size)},
        )
        return cast(dict[str, Any], payload)

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if response.status_code >= 400:
            payload: Any
            try:
                payload = response.json()
            except ValueError:
                payload = response.text
            raise BitgetApiError(status_code=response.status_code, payload=payload)
        try:
            return response.json()
        except ValueError as e:
            raise BitgetResponseError(f"response is not JSON: {response.text[:200]!r}") from e
