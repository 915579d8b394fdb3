from fastapi import APIRouter

router = APIRouter(tags=["Core"])


# GET /
# Gets: nothing
# Returns: basic API metadata and a map of key endpoints
# Example:
#   curl http://localhost:8000/
@router.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "CallFlow API - Call Operations Assistant",
        "version": "1.0.0",
        "description": "Completion proxy for the call-operations dashboard - answers chat turns with the board state as context",
        "endpoints": {
            "agent": "/api/agent",
            "health": "/health",
            "health_info": "/health/info",
            "metrics": "/metrics",
        },
        "features": [
            "Call queue and task context rendering",
            "Single-attempt OpenAI completion proxy",
            "Structured error responses",
        ],
    }
