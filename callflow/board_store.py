"""In-memory board state: calls, tasks, selection, and the chat transcript."""

import uuid
from datetime import datetime, time, timedelta, tzinfo
from typing import Optional

from callflow.formatting import display_time, parse_timestamp, to_iso
from callflow.models import (
    AgentMessage,
    BoardState,
    BoardStats,
    CallRecord,
    CallStatus,
    NewCallForm,
    TaskItem,
)

GREETING = (
    "Hi, I'm CallFlow. I monitor your call queue, prep materials, and keep follow-ups on track. "
    "Select a call or tell me what you need."
)


def new_id(prefix: str = "") -> str:
    return f"{prefix}{uuid.uuid4()}"


class BoardStore:
    """
    Single-writer store for one dashboard session.

    Mutations happen in place through the named methods; ``snapshot()`` builds
    the read-only projection sent with each agent request.
    """

    def __init__(
        self,
        calls: Optional[list[CallRecord]] = None,
        tasks: Optional[list[TaskItem]] = None,
        selected_call_id: Optional[str] = None,
        messages: Optional[list[AgentMessage]] = None,
        tz: Optional[tzinfo] = None,
    ):
        self.calls: list[CallRecord] = list(calls or [])
        self.tasks: list[TaskItem] = list(tasks or [])
        self.selected_call_id = selected_call_id
        self.messages: list[AgentMessage] = list(messages or [])
        self.tz = tz or datetime.now().astimezone().tzinfo

    @classmethod
    def with_sample_data(cls, now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> "BoardStore":
        """Demo board relative to local midnight of ``now``."""
        tz = tz or datetime.now().astimezone().tzinfo
        now = (now or datetime.now(tz)).astimezone(tz)
        midnight = datetime.combine(now.date(), time.min, tzinfo=tz)

        def at(hours: int) -> str:
            return to_iso(midnight + timedelta(hours=hours))

        calls = [
            CallRecord(
                id="call-1",
                contact="Jordan Smith",
                company="Acme Logistics",
                role="Operations Director",
                phone="+1 (312) 555-9021",
                scheduled=at(10),
                priority="High",
                status="Scheduled",
                owner="Taylor",
                focus="Renew enterprise contract and uncover expansion opportunity",
                notes="Customer flagged missed SLAs last week; prep updated fulfillment report.",
                next_action="Present revised SLA dashboard and map upgrade path.",
                tags=["Renewal", "At-Risk"],
            ),
            CallRecord(
                id="call-2",
                contact="Mei Chen",
                company="Brightside Health",
                role="Head of Patient Ops",
                phone="+1 (415) 555-7322",
                scheduled=at(13),
                priority="Medium",
                status="Scheduled",
                owner="Alex",
                focus="Walk through pilot analytics and align on rollout timeline",
                notes="They need patient engagement benchmarks before expanding.",
                last_outcome="Requested comparative metrics vs Q1 baseline to share with COO.",
                next_action="Compile engagement benchmarks and flag likely blockers to rollout.",
                tags=["Pilot", "Analytics"],
            ),
            CallRecord(
                id="call-3",
                contact="Luis Ramirez",
                company="Northwind Holdings",
                role="Portfolio Manager",
                phone="+1 (917) 555-1844",
                scheduled=at(-3),
                priority="High",
                status="Needs Follow-up",
                owner="Jordan",
                focus="Resolve billing dispute on overage fees",
                notes="Send revised invoice and capture approval; identify root cause of overage.",
                last_outcome="Call ended with action to deliver updated billing detail within 4hrs.",
                next_action="Escalate to finance for credit approval and draft apology email.",
                sentiment="Negative",
                tags=["Billing", "Escalation"],
            ),
        ]
        tasks = [
            TaskItem(
                id="task-1",
                title="Finalize SLA recovery deck for Acme Logistics",
                due=at(8),
                owner="Taylor",
                category="Preparation",
                completed=False,
            ),
            TaskItem(
                id="task-2",
                title="Compile engagement benchmarks for Brightside pilot",
                due=at(12),
                owner="Alex",
                category="Insights",
                completed=False,
            ),
            TaskItem(
                id="task-3",
                title="Send revised invoice to Northwind finance team",
                due=at(2),
                owner="Jordan",
                category="Follow-up",
                completed=False,
            ),
        ]
        greeting = AgentMessage(id="assistant-initial", role="assistant", content=GREETING)
        return cls(calls=calls, tasks=tasks, selected_call_id=calls[0].id, messages=[greeting], tz=tz)

    # Lookups

    def get_call(self, call_id: Optional[str]) -> Optional[CallRecord]:
        for call in self.calls:
            if call.id == call_id:
                return call
        return None

    def get_task(self, task_id: str) -> Optional[TaskItem]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    @property
    def selected_call(self) -> Optional[CallRecord]:
        return self.get_call(self.selected_call_id)

    # Mutations

    def add_call(self, form: NewCallForm, now: Optional[datetime] = None) -> CallRecord:
        """Insert a new Scheduled call at the head of the queue and select it."""
        existing = {call.id for call in self.calls}
        call_id = new_id()
        while call_id in existing:
            call_id = new_id()

        scheduled = parse_timestamp(form.scheduled, self.tz)
        if scheduled is None:
            # NewCallForm only lets blank values through unparsed.
            scheduled = now or datetime.now(self.tz)

        call = CallRecord(
            id=call_id,
            contact=form.contact,
            company=form.company,
            role=form.role,
            phone=form.phone,
            scheduled=to_iso(scheduled),
            priority=form.priority,
            status="Scheduled",
            owner=form.owner,
            focus=form.focus,
            notes="",
            next_action="",
        )
        self.calls.insert(0, call)
        self.selected_call_id = call.id
        return call

    def update_status(self, call_id: str, status: CallStatus) -> Optional[CallRecord]:
        call = self.get_call(call_id)
        if call is None:
            return None
        call.status = status
        # Completing a call always marks it Positive, overriding prior sentiment.
        if status == "Completed":
            call.sentiment = "Positive"
        return call

    def update_notes(self, call_id: str, notes: str) -> Optional[CallRecord]:
        call = self.get_call(call_id)
        if call is not None:
            call.notes = notes
        return call

    def update_next_action(self, call_id: str, next_action: str) -> Optional[CallRecord]:
        call = self.get_call(call_id)
        if call is not None:
            call.next_action = next_action
        return call

    def toggle_task_completion(self, task_id: str) -> Optional[TaskItem]:
        task = self.get_task(task_id)
        if task is not None:
            task.completed = not task.completed
        return task

    def select_call(self, call_id: Optional[str]) -> None:
        # Unknown ids are accepted and simply resolve to no selection.
        self.selected_call_id = call_id

    def append_message(self, message: AgentMessage) -> AgentMessage:
        self.messages.append(message)
        return message

    # Derived views

    def snapshot(self) -> BoardState:
        """Deep copy of the board for an outbound request."""
        snapshot = BoardState(
            calls=[call.model_copy(deep=True) for call in self.calls],
            tasks=[task.model_copy(deep=True) for task in self.tasks],
        )
        # No selection is sent as an absent field, never as null.
        if self.selected_call_id is not None:
            snapshot.selected_call_id = self.selected_call_id
        return snapshot

    def _sort_key(self, call: CallRecord) -> tuple:
        parsed = parse_timestamp(call.scheduled, self.tz)
        # Unparseable timestamps sort last.
        return (parsed is None, parsed.timestamp() if parsed else 0.0)

    def sorted_calls(self) -> list[CallRecord]:
        """Calls in ascending scheduled order (stable for ties)."""
        return sorted(self.calls, key=self._sort_key)

    def next_call(self, now: Optional[datetime] = None) -> Optional[CallRecord]:
        """Earliest Scheduled call at or after ``now``."""
        now = now or datetime.now(self.tz)
        if now.tzinfo is None:
            now = now.replace(tzinfo=self.tz)
        for call in self.sorted_calls():
            if call.status != "Scheduled":
                continue
            scheduled = parse_timestamp(call.scheduled, self.tz)
            if scheduled is not None and scheduled >= now:
                return call
        return None

    def stats(self, now: Optional[datetime] = None) -> BoardStats:
        next_call = self.next_call(now)
        if next_call:
            label = f"{next_call.contact} • {display_time(next_call.scheduled, self.tz)}"
        else:
            label = "No upcoming calls"
        return BoardStats(
            total_calls=len(self.calls),
            scheduled_count=sum(1 for call in self.calls if call.status == "Scheduled"),
            follow_up_count=sum(1 for call in self.calls if call.status == "Needs Follow-up"),
            high_priority_count=sum(1 for call in self.calls if call.priority == "High"),
            escalations=sum(1 for call in self.calls if call.sentiment == "Negative"),
            next_call_label=label,
        )

    def active_tasks(self) -> list[TaskItem]:
        return [task for task in self.tasks if not task.completed]

    def completed_tasks(self) -> list[TaskItem]:
        return [task for task in self.tasks if task.completed]
