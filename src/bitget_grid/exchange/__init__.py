__all__ = ["BitgetApiError", "BitgetError", "BitgetResponseError", "BitgetSpotClient"]

from bitget_grid.exchange.bitget_spot import (
    BitgetApiError,
    BitgetError,
    BitgetResponseError,
    BitgetSpotClient,
)
