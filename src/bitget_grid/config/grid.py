from __future__ import annotations

import tomllib
from decimal import Decimal
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_SYMBOLS: tuple[str, ...] = ("BTCUSDT", "ETHUSDT")
DEFAULT_GRID_SPACING = Decimal("0.02")
DEFAULT_LOT_SIZE = Decimal("0.001")


class GridConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    symbols: tuple[str, ...] = Field(default=DEFAULT_SYMBOLS, min_length=1)
    # Fractional move above the last buy price that triggers a sell and rebuy.
    grid_spacing: Decimal = Field(default=DEFAULT_GRID_SPACING, gt=0)
    # Base-asset quantity per order.
    lot_size: Decimal = Field(default=DEFAULT_LOT_SIZE, gt=0)

    def validate_logic(self) -> None:
        if any(not s.strip() for s in self.symbols):
            raise ValueError("grid.symbols must not contain blank entries")
        if len(set(self.symbols)) != len(self.symbols):
            raise ValueError("grid.symbols must be unique")


class GridFileConfig(BaseModel):
    grid: GridConfig = Field(default_factory=GridConfig)


def load_grid_config(path: Path) -> GridConfig:
    raw = tomllib.loads(path.read_text(encoding="utf-8"))
    cfg = GridFileConfig.model_validate(raw).grid
    cfg.validate_logic()
    return cfg
