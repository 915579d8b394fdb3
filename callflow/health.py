"""
Health check and monitoring endpoints.
"""

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from callflow.config import config

router = APIRouter(tags=["Health & Monitoring"])


# GET /health
# Gets: nothing
# Returns: {status, service, version}
# Example:
#   curl http://localhost:8000/health
@router.get("/health")
async def health_check():
    """
    Basic health check - returns 200 if service is running.
    Use this for liveness probes. A missing OpenAI key does not make the
    service unhealthy; /api/agent reports it per request.
    """
    return {
        "status": "healthy",
        "service": "callflow",
        "version": "1.0.0",
    }


# GET /health/info
# Gets: nothing
# Returns: service configuration summary
# Example:
#   curl http://localhost:8000/health/info
@router.get("/health/info")
async def system_info():
    """
    System information and configuration status.
    """
    return {
        "service": "callflow",
        "version": "1.0.0",
        "configuration": {
            "openai_configured": config.has_openai_key(),
            "openai_model": config.OPENAI_MODEL if config.has_openai_key() else None,
            "display_timezone": config.DISPLAY_TIMEZONE,
            "debug_mode": config.DEBUG,
        },
        "features": {
            "llm_conversations": config.has_openai_key(),
            "session_persistence": False,
            "streaming": False,
        },
    }


# GET /metrics
# Gets: nothing
# Returns: Prometheus text exposition
# Example:
#   curl http://localhost:8000/metrics
@router.get("/metrics")
async def metrics():
    """Prometheus scrape endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
