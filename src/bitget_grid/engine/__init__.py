__all__ = [
    "GridEngine",
    "GridPassResult",
    "GridStateStore",
    "handle_grid_invocation",
    "run_grid_pass",
]

from bitget_grid.engine.grid import GridEngine, GridStateStore
from bitget_grid.engine.handler import GridPassResult, handle_grid_invocation, run_grid_pass
