"""
Context rendering for the call-operations assistant.
Turns a board snapshot into the system instruction sent to the completion model.
"""

from datetime import tzinfo
from typing import Dict, List, Optional

from callflow.formatting import display_timestamp
from callflow.models import AgentRequest, BoardState, CallRecord, TaskItem

# Persona directive; the rendered board context is appended after a blank line.
SYSTEM_PROMPT = """You are CallFlow, an elite business call operations AI.
You orchestrate complex customer conversations, mitigate risk, unlock expansion opportunities, and write editorial-quality follow-ups.

Operating principles:
- Prioritise call outcomes, measurable next actions, and strategic guidance.
- Be concise yet actionable; use bullets and headings when it improves readability.
- Keep tone calm, confident, and revenue-focused.
- When asked for emails or scripts, provide fully drafted artifacts with subject lines.
- Reference call owners, customers, and timelines pulled from the call state.
- If information is missing, state the assumption and proceed."""

NO_CALLS_TEXT = "No calls on the board."
NO_TASKS_TEXT = "No tasks logged."
NO_SELECTION_TEXT = "No call currently selected."
NEXT_ACTION_PLACEHOLDER = "Not captured yet"


def _call_line(call: CallRecord, tz: tzinfo) -> str:
    when = display_timestamp(call.scheduled, tz)
    return (
        f"• {call.contact} ({call.company}) - {call.status}, priority {call.priority}. "
        f"Owner {call.owner}. Focus: {call.focus}. Time {when}."
    )


def _task_line(task: TaskItem, tz: tzinfo) -> str:
    due = display_timestamp(task.due, tz)
    state = "completed" if task.completed else "open"
    return f"• {task.title} - {task.category} owned by {task.owner}, due {due}, {state}."


def find_call(state: BoardState, call_id: Optional[str]) -> Optional[CallRecord]:
    if call_id is None:
        return None
    for call in state.calls:
        if call.id == call_id:
            return call
    return None


def render_context(state: BoardState, tz: tzinfo) -> str:
    """
    Render the board snapshot as three sections: queue, tasks, active lens.

    Pure function of ``state`` and ``tz``; identical inputs give identical text.
    """
    if state.calls:
        queue = "\n".join(_call_line(call, tz) for call in state.calls)
    else:
        queue = NO_CALLS_TEXT

    if state.tasks:
        tasks = "\n".join(_task_line(task, tz) for task in state.tasks)
    else:
        tasks = NO_TASKS_TEXT

    selected = find_call(state, state.selected_call_id)
    if selected:
        next_action = (selected.next_action or "").strip().removesuffix(".") or NEXT_ACTION_PLACEHOLDER
        lens = (
            f"Focus on {selected.contact} ({selected.company}). "
            f"Objective: {selected.focus}. Next action: {next_action}."
        )
    else:
        lens = NO_SELECTION_TEXT

    return f"Current queue:\n{queue}\n\nTasks:\n{tasks}\n\nActive lens:\n{lens}"


def build_system_instruction(state: BoardState, tz: tzinfo) -> str:
    return f"{SYSTEM_PROMPT}\n\n{render_context(state, tz)}"


def build_completion_messages(request: AgentRequest, tz: tzinfo) -> List[Dict[str, str]]:
    """System instruction followed by the conversation, roles and content untouched."""
    messages = [{"role": "system", "content": build_system_instruction(request.state, tz)}]
    for message in request.messages:
        messages.append({"role": message.role, "content": message.content})
    return messages
