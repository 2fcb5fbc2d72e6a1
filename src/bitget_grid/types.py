from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Literal

Side = Literal["buy", "sell"]


@dataclass(frozen=True)
class OrderRequest:
    symbol: str
    side: Side
    price: Decimal
    size: Decimal
    # Grid orders are always resting limit orders, good till cancelled.
    order_type: Literal["limit"] = "limit"
    force: Literal["gtc"] = "gtc"


@dataclass
class SymbolState:
    last_buy_price: Decimal | None = None
    needs_reconciliation: bool = False
    reconciliation_reason: str = ""
