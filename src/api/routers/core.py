"""Core routes for the Reelsmith API (root and health check)."""

from typing import Annotated

from api.dependencies import get_run_registry
from api.schemas import HealthResponse, RootResponse
from fastapi import APIRouter, Depends
from services.run_registry import RunRegistry

router = APIRouter(tags=["Core"])


@router.get(
    "/",
    response_model=RootResponse,
    summary="API root",
    description="Returns API name and version.",
)
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Reelsmith API", "version": "1.0.0"}


@router.get(
    "/api/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns server health status and the number of pipeline runs in flight.",
)
async def health(registry: Annotated[RunRegistry, Depends(get_run_registry)]) -> dict:
    """Health check endpoint."""
    return {"status": "healthy", "active_runs": registry.active_count}
