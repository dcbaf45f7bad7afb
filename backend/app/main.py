"""FastAPI application - vein treatment preview API."""

import logging

from fastapi import FastAPI

from backend.app.api.routes.documents import router as documents_router
from backend.app.api.routes.health import router as health_router
from backend.app.api.routes.images import router as images_router
from backend.app.api.routes.metrics import router as metrics_router
from backend.app.api.routes.settings import router as settings_router
from backend.app.config import get_settings

logging.basicConfig(level=get_settings().log_level)

app = FastAPI(title="Vein Treatment Preview API", version="0.1.0")

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(settings_router, tags=["settings"])
app.include_router(documents_router, tags=["documents"])
app.include_router(images_router, tags=["images"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Vein Treatment Preview API", "version": "0.1.0"}
