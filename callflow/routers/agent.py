import time

from fastapi import APIRouter

from callflow import llm_agent
from callflow.exceptions import CallFlowError
from callflow.metrics import agent_request_duration, agent_requests_total
from callflow.models import AgentReply, AgentRequest, ErrorResponse

router = APIRouter(tags=["Agent"])


# POST /api/agent
# Gets: JSON body {messages: [{role, content}, ...], state: {calls?, tasks?, selectedCallId?}}
# Returns: {reply: str}; errors are {error: str} with 400 / 500 / 502
# Example:
#   curl -X POST http://localhost:8000/api/agent \
#     -H 'Content-Type: application/json' \
#     -d '{"messages": [{"role": "user", "content": "Who do I call next?"}], "state": {}}'
@router.post(
    "/api/agent",
    response_model=AgentReply,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
def agent_reply(request: AgentRequest):
    """Answer one chat turn using the conversation and the board snapshot."""
    started = time.perf_counter()
    try:
        reply = llm_agent.generate_reply(request)
    except CallFlowError as exc:
        agent_requests_total.labels(outcome=type(exc).__name__).inc()
        raise
    finally:
        agent_request_duration.observe(time.perf_counter() - started)

    agent_requests_total.labels(outcome="success").inc()
    return AgentReply(reply=reply)
