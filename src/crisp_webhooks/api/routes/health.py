"""Health check endpoints."""

from fastapi import APIRouter, Request

from crisp_webhooks import __version__

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Return service health status and the receivers this process serves."""
    pipeline = request.app.state.pipeline
    return {
        "status": "healthy",
        "service": "crisp-webhooks",
        "version": __version__,
        "receivers": pipeline.registry.names(),
    }


@router.get("/health/live")
async def liveness():
    """Liveness probe: always returns 200 if the process is running."""
    return {"status": "alive"}
