from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
import logging

from manor.api.deps import init_progress_store
from manor.api.routes import router
from manor.lock import PlayerBusyError
from manor.manor_service import ManorRejection
from manor.settings import load_settings

app = FastAPI(
    title="haunted-manor",
    version="0.1.0",
    description="REST API simulation for escaping a haunted manor through HTTP puzzles.",
)
app.include_router(router)
# Configure logging
logging.basicConfig(level=load_settings().log_level)
logger = logging.getLogger(__name__)


@app.exception_handler(ManorRejection)
async def _manor_rejection(request: Request, exc: ManorRejection) -> JSONResponse:
    return JSONResponse(status_code=400, content=exc.response.model_dump(mode="json", by_alias=True))


@app.exception_handler(PlayerBusyError)
async def _player_busy(request: Request, exc: PlayerBusyError) -> JSONResponse:
    logger.warning("lock timeout for player %s", exc.player_id)
    return JSONResponse(status_code=409, content={"error": str(exc)})


@app.on_event("startup")
async def _startup() -> None:
    init_progress_store()


@app.get("/")
async def _root() -> RedirectResponse:
    return RedirectResponse(url="/docs")


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "haunted-manor", "version": "0.1.0"}
