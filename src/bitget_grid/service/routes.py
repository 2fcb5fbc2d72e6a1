from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from bitget_grid.engine import GridEngine, handle_grid_invocation

router = APIRouter()


def _engine(request: Request) -> GridEngine:
    return request.app.state.grid_engine


@router.api_route("/api/bitget-gridbot", methods=["GET", "POST"])
async def run_grid_bot(request: Request):
    status_code, body = await handle_grid_invocation(_engine(request))
    return JSONResponse(status_code=status_code, content=body)


@router.get("/api/grid/state")
async def get_grid_state(request: Request):
    engine = _engine(request)
    return {"symbols": list(engine.config.symbols), "state": engine.store.snapshot()}


@router.post("/api/grid/{symbol}/reset")
async def reset_grid_symbol(symbol: str, request: Request):
    engine = _engine(request)
    if symbol not in engine.config.symbols:
        raise HTTPException(status_code=404, detail=f"symbol not tracked: {symbol}")
    async with engine.store.lock(symbol):
        engine.store.reset(symbol)
    return {"ok": True, "symbol": symbol}


@router.get("/healthz")
async def healthz():
    return {"ok": True}
