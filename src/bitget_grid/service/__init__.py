__all__ = ["create_app"]

from bitget_grid.service.main import create_app
