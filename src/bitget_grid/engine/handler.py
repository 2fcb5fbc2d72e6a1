from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from bitget_grid.engine.grid import GridEngine
from bitget_grid.exchange import BitgetApiError

logger = logging.getLogger("bitget_grid.handler")

FAILURE_MESSAGE = "Bot failed to run"


@dataclass(frozen=True)
class GridPassResult:
    timestamp: datetime
    logs: list[str] = field(default_factory=list)


async def run_grid_pass(engine: GridEngine, symbols: Sequence[str] | None = None) -> GridPassResult:
    """Run the engine once per symbol, in order.

    The first failure aborts the pass; later symbols are not touched.
    """
    symbols = symbols if symbols is not None else engine.config.symbols
    logs: list[str] = []
    for symbol in symbols:
        logs.extend(await engine.run_symbol(symbol))
    return GridPassResult(timestamp=datetime.now(tz=UTC), logs=logs)


async def handle_grid_invocation(
    engine: GridEngine,
    symbols: Sequence[str] | None = None,
) -> tuple[int, dict[str, Any]]:
    try:
        result = await run_grid_pass(engine, symbols)
    except Exception as e:
        extra: dict[str, Any] = {}
        if isinstance(e, BitgetApiError):
            extra["status_code"] = e.status_code
            extra["payload"] = e.payload
        logger.exception("grid_pass_failed", extra=extra)
        return 500, {"error": FAILURE_MESSAGE, "details": str(e)}
    return 200, {
        "success": True,
        "timestamp": result.timestamp.isoformat().replace("+00:00", "Z"),
        "logs": result.logs,
    }
