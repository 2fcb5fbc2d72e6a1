__all__ = ["GridConfig", "load_grid_config"]

from bitget_grid.config.grid import GridConfig, load_grid_config
