from bitget_grid.cli import app

app()
