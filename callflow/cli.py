#!/usr/bin/env python3
"""Text-mode dashboard: manage the board and chat with CallFlow via /api/agent."""

from __future__ import annotations

import argparse
import shlex
import sys

from pydantic import ValidationError

from callflow.board_store import BoardStore
from callflow.client import DashboardSession
from callflow.config import config
from callflow.formatting import display_timestamp
from callflow.models import NewCallForm

HELP = """Commands:
  /calls                      board in scheduled order
  /tasks                      task checklist
  /stats                      headline counters
  /select <call-id>           change the active call
  /status <call-id> <status>  Scheduled | Completed | "Needs Follow-up"
  /notes <call-id> <text>     replace notes
  /next <call-id> <text>      replace next action
  /toggle <task-id>           flip a task's completed flag
  /add key=value ...          contact company role phone owner focus [scheduled priority]
  /brief                      regenerate the selected call's brief into its notes
  /help                       this text
  /exit                       quit
Anything else is sent to the agent."""


def _print_calls(session: DashboardSession) -> None:
    store = session.store
    if not store.calls:
        print("(no calls)")
        return
    for call in store.sorted_calls():
        marker = "*" if call.id == store.selected_call_id else " "
        when = display_timestamp(call.scheduled, store.tz)
        sentiment = f" [{call.sentiment}]" if call.sentiment else ""
        print(f"{marker} {call.id}  {when}  {call.contact} ({call.company})  {call.status}/{call.priority}{sentiment}")


def _print_tasks(session: DashboardSession) -> None:
    store = session.store
    for task in store.active_tasks() + store.completed_tasks():
        box = "x" if task.completed else " "
        print(f"[{box}] {task.id}  {task.title}  ({task.category}, {task.owner}, due {display_timestamp(task.due, store.tz)})")


def _print_stats(session: DashboardSession) -> None:
    stats = session.store.stats()
    print(
        f"calls={stats.total_calls} scheduled={stats.scheduled_count} follow-ups={stats.follow_up_count} "
        f"high-priority={stats.high_priority_count} escalations={stats.escalations}"
    )
    print(f"next: {stats.next_call_label}")


def _add_call(session: DashboardSession, args: list[str]) -> None:
    fields = dict(arg.split("=", 1) for arg in args if "=" in arg)
    try:
        form = NewCallForm(**fields)
    except ValidationError as e:
        missing = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        print(f"error> invalid call form: {missing}")
        return
    call = session.store.add_call(form)
    print(f"added {call.id} and selected it")


def handle_command(session: DashboardSession, line: str) -> bool:
    """Run one slash command. Returns False when the loop should stop."""
    try:
        parts = shlex.split(line)
    except ValueError as e:
        print(f"error> {e}")
        return True
    command, args = parts[0].lower(), parts[1:]
    store = session.store

    if command in {"/exit", "/quit"}:
        return False
    if command == "/help":
        print(HELP)
    elif command == "/calls":
        _print_calls(session)
    elif command == "/tasks":
        _print_tasks(session)
    elif command == "/stats":
        _print_stats(session)
    elif command == "/select" and len(args) == 1:
        store.select_call(args[0])
    elif command == "/status" and len(args) == 2:
        try:
            if store.update_status(args[0], args[1]) is None:
                print(f"error> unknown call {args[0]}")
        except ValidationError:
            print(f"error> unknown status {args[1]}")
    elif command == "/notes" and len(args) >= 2:
        store.update_notes(args[0], " ".join(args[1:]))
    elif command == "/next" and len(args) >= 2:
        store.update_next_action(args[0], " ".join(args[1:]))
    elif command == "/toggle" and len(args) == 1:
        if store.toggle_task_completion(args[0]) is None:
            print(f"error> unknown task {args[0]}")
    elif command == "/add":
        _add_call(session, args)
    elif command == "/brief":
        brief = session.refresh_call_brief()
        print(brief if brief else "(brief unavailable)")
    else:
        print(HELP)
    return True


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Interactive CallFlow dashboard backed by /api/agent")
    parser.add_argument("--base-url", default=config.BASE_URL, help=f"API base URL (default: {config.BASE_URL})")
    parser.add_argument("--timeout", type=float, default=45.0, help="HTTP timeout seconds (default: 45)")
    parser.add_argument("--empty", action="store_true", help="Start with an empty board instead of the sample data")
    args = parser.parse_args(argv)

    store = BoardStore() if args.empty else BoardStore.with_sample_data()

    print("CallFlow dashboard. Type /help for commands, /exit to quit.")
    for message in store.messages:
        print(f"agent> {message.content}")

    with DashboardSession.connect(store, base_url=args.base_url, timeout=args.timeout) as session:
        while True:
            try:
                line = input("you> ").strip()
            except (EOFError, KeyboardInterrupt):
                print()
                break

            if not line:
                continue
            if line.startswith("/"):
                if not handle_command(session, line):
                    break
                continue

            reply = session.send_message(line)
            if reply is not None:
                print(f"agent> {reply.content}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
