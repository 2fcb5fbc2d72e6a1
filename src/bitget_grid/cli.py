from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

import typer

from bitget_grid.config.grid import GridConfig, load_grid_config
from bitget_grid.engine import GridEngine, handle_grid_invocation
from bitget_grid.exchange import BitgetSpotClient
from bitget_grid.logging_utils import configure_logging
from bitget_grid.settings import Settings

app = typer.Typer(no_args_is_help=True, add_completion=False)
logger = logging.getLogger("bitget_grid")


def _make_client(settings: Settings) -> BitgetSpotClient:
    return BitgetSpotClient(
        api_key=settings.bitget_api_key,
        api_secret=settings.bitget_api_secret,
        passphrase=settings.bitget_passphrase,
        base_url=settings.bitget_base_url,
        timeout_seconds=settings.http_timeout_seconds,
    )


def _load_grid(config: Path | None) -> GridConfig:
    if config is None:
        return GridConfig()
    if not config.exists():
        raise typer.BadParameter(f"config file not found: {config}")
    try:
        return load_grid_config(config)
    except ValueError as e:
        raise typer.BadParameter(f"invalid config: {e}") from e


@app.command()
def config_init(
    path: Path = typer.Option(Path(".env"), help="Path to write a starter .env file."),
    overwrite: bool = typer.Option(False, "--overwrite", help="Overwrite if exists."),
) -> None:
    """
    Create a starter `.env` file (copy from `.env.example`).
    """
    example_path = Path(".env.example")
    if not example_path.exists():
        raise typer.Exit(code=2)

    if path.exists() and not overwrite:
        raise typer.Exit(code=1)

    path.write_text(example_path.read_text(encoding="utf-8"), encoding="utf-8")
    typer.echo(f"Wrote {path}")


@app.command()
def show_config(
    config: Path | None = typer.Option(None, help="Optional grid TOML file."),
) -> None:
    settings = Settings()
    configure_logging(settings.log_level)
    grid = _load_grid(config)
    out: dict[str, Any] = settings.redacted()
    out["grid"] = grid.model_dump(mode="json")
    typer.echo(json.dumps(out, indent=2))


@app.command()
def ticker(symbol: str = typer.Argument(..., help="Trading pair, e.g. BTCUSDT.")) -> None:
    """
    Fetch and print the current price for one symbol.
    """
    settings = Settings()
    configure_logging(settings.log_level)

    async def _run() -> None:
        client = _make_client(settings)
        try:
            price = await client.get_ticker(symbol)
            typer.echo(json.dumps({"ok": True, "symbol": symbol, "price": format(price, "f")}))
        finally:
            await client.aclose()

    asyncio.run(_run())


@app.command()
def run_once(
    config: Path | None = typer.Option(None, help="Optional grid TOML file."),
) -> None:
    """
    Run one grid pass over every configured symbol and print the result.
    """
    settings = Settings()
    configure_logging(settings.log_level)
    grid = _load_grid(config)

    async def _run() -> tuple[int, dict[str, Any]]:
        client = _make_client(settings)
        try:
            engine = GridEngine(client=client, config=grid)
            return await handle_grid_invocation(engine)
        finally:
            await client.aclose()

    status_code, body = asyncio.run(_run())
    typer.echo(json.dumps(body, indent=2))
    if status_code != 200:
        raise typer.Exit(code=1)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address."),
    port: int = typer.Option(8000, help="Bind port."),
) -> None:
    """
    Serve the grid handler over HTTP.
    """
    import uvicorn

    from bitget_grid.service import create_app

    settings = Settings()
    configure_logging(settings.log_level)
    logger.info("serve_starting")
    uvicorn.run(create_app(settings=settings), host=host, port=port, log_config=None)
