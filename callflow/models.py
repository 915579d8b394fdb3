"""Data models for CallFlow: board records, chat turns, and the agent wire schema."""

from datetime import timezone
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, StringConstraints, field_validator
from pydantic.alias_generators import to_camel

from callflow.formatting import parse_timestamp

Priority = Literal["High", "Medium", "Low"]
CallStatus = Literal["Scheduled", "Completed", "Needs Follow-up"]
Sentiment = Literal["Positive", "Neutral", "Negative"]
TaskCategory = Literal["Follow-up", "Preparation", "Insights"]
MessageRole = Literal["assistant", "user"]

RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


def reject_null(value):
    """Optional wire fields may be left out, but an explicit null is a type error."""
    if value is None:
        raise ValueError("may be omitted but must not be null")
    return value


class WireModel(BaseModel):
    """Base for everything that crosses the /api/agent boundary.

    camelCase on the wire, snake_case in Python. Scalars use the Strict*
    types so a number is never accepted where text is expected.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )


class CallRecord(WireModel):
    """One tracked customer call."""
    id: StrictStr
    contact: StrictStr
    company: StrictStr
    role: StrictStr
    phone: StrictStr
    scheduled: StrictStr  # ISO-8601 timestamp
    priority: Priority
    status: CallStatus
    owner: StrictStr
    focus: StrictStr
    notes: StrictStr
    last_outcome: Optional[StrictStr] = None
    next_action: Optional[StrictStr] = None
    sentiment: Optional[Sentiment] = None
    tags: Optional[list[StrictStr]] = None

    @field_validator("last_outcome", "next_action", "sentiment", "tags", mode="before")
    @classmethod
    def _omitted_not_null(cls, value):
        return reject_null(value)


class TaskItem(WireModel):
    """One actionable follow-up."""
    id: StrictStr
    title: StrictStr
    due: StrictStr  # ISO-8601 timestamp
    owner: StrictStr
    category: TaskCategory
    completed: StrictBool


class ChatMessage(WireModel):
    """A conversation turn as sent to the proxy."""
    role: MessageRole
    content: StrictStr


class AgentMessage(ChatMessage):
    """A conversation turn in the client transcript."""
    id: StrictStr


class BoardState(WireModel):
    """Snapshot of the board sent with every agent request."""
    calls: list[CallRecord] = Field(default_factory=list)
    tasks: list[TaskItem] = Field(default_factory=list)
    selected_call_id: Optional[StrictStr] = None

    @field_validator("selected_call_id", mode="before")
    @classmethod
    def _omitted_not_null(cls, value):
        return reject_null(value)


class AgentRequest(WireModel):
    """Request body for POST /api/agent."""
    messages: list[ChatMessage] = Field(min_length=1)
    state: BoardState = Field(default_factory=BoardState)


class AgentReply(BaseModel):
    """Successful response from POST /api/agent."""
    reply: str


class ErrorResponse(BaseModel):
    """Error response from POST /api/agent."""
    error: str


class NewCallForm(BaseModel):
    """Fields captured by the new-call form."""
    contact: RequiredText
    company: RequiredText
    role: RequiredText
    phone: RequiredText
    scheduled: str = ""  # empty means "now"
    priority: Priority = "Medium"
    owner: RequiredText
    focus: RequiredText

    @field_validator("scheduled")
    @classmethod
    def _scheduled_is_iso_or_blank(cls, value: str) -> str:
        if value.strip() and parse_timestamp(value, timezone.utc) is None:
            raise ValueError("scheduled must be an ISO-8601 timestamp or left blank")
        return value


class BoardStats(BaseModel):
    """Headline counters shown above the board."""
    total_calls: int
    scheduled_count: int
    follow_up_count: int
    high_priority_count: int
    escalations: int
    next_call_label: str
