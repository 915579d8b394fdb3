"""Prometheus metrics for the completion proxy."""

from prometheus_client import Counter, Histogram

agent_requests_total = Counter(
    "agent_requests_total",
    "Agent requests by outcome",
    ["outcome"],
)
agent_request_duration = Histogram(
    "agent_request_duration_seconds",
    "Time spent answering an agent request, including the model call",
)
