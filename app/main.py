from fastapi import FastAPI
import logging

from app.api.deps import close_campaign
from app.api.routes import router
from app.assets.startup import init_assets_for_app

app = FastAPI(title="puzzle-campaign", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@app.on_event("startup")
async def _startup() -> None:
    init_assets_for_app()


@app.on_event("shutdown")
async def _shutdown() -> None:
    # Cancel any pending stage hand-off timers before the loop goes away.
    close_campaign()


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "puzzle-campaign", "version": "0.1.0"}
