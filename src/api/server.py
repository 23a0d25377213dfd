#!/usr/bin/env python
"""FastAPI server for the Reelsmith web service."""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

# Add src directory to Python path for imports
src_dir = Path(__file__).parent.parent
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from api.dependencies import get_config, get_run_registry
from api.routers import captions, core, generation, media, projects, videos
from services.errors import (
    NotFoundOrUnauthorized,
    PreconditionError,
    ProviderError,
    ReelsmithError,
    ValidationError,
)
from services.video_store import close_video_store, get_video_store
from utils.config import validate_config
from utils.logging import setup_logging

logger = logging.getLogger(__name__)

# Seconds to let in-flight pipeline runs finish on shutdown
SHUTDOWN_DRAIN_SECONDS = 30.0

ERROR_STATUS_CODES = (
    (ValidationError, 400),
    (NotFoundOrUnauthorized, 404),
    (PreconditionError, 409),
    (ProviderError, 502),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the store on startup; drain runs and close it on shutdown."""
    config = get_config()
    for error in validate_config(config):
        logger.warning(f"Configuration: {error}")

    await get_video_store(config["database_path"])
    logger.info(
        f"Reelsmith API started (media={config['media_provider']}, "
        f"transcription={config['transcription_provider']})"
    )

    yield

    still_running = await get_run_registry().drain(SHUTDOWN_DRAIN_SECONDS)
    if still_running:
        logger.warning(f"Shutting down with {still_running} pipeline runs unfinished")
    await close_video_store()


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    config = get_config()
    setup_logging(config["log_level"], json_output=config["log_json"])

    app = FastAPI(title="Reelsmith API", version="1.0.0", lifespan=lifespan)

    # CORS middleware for development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config["cors_origins"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ReelsmithError)
    async def reelsmith_error_handler(request: Request, exc: ReelsmithError) -> JSONResponse:
        for error_type, status_code in ERROR_STATUS_CODES:
            if isinstance(exc, error_type):
                return JSONResponse(status_code=status_code, content={"detail": str(exc)})
        logger.error(f"Unhandled {type(exc).__name__} on {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Unexpected error on {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    for module in (core, projects, videos, generation, captions, media):
        app.include_router(module.router)

    upload_dir = Path(config["upload_dir"])
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=str(upload_dir)), name="uploads")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
