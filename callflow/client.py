"""
Dashboard session: owns the board store and talks to the completion proxy.
"""

import threading
from typing import Any, Dict, List, Optional

import httpx

from callflow.board_store import BoardStore, new_id
from callflow.config import config
from callflow.exceptions import ClientTransportError
from callflow.logging_config import get_logger
from callflow.models import AgentMessage, BoardState, ChatMessage

logger = get_logger(__name__)

AGENT_PATH = "/api/agent"

UNPARSEABLE_REPLY_TEXT = (
    "I wasn't able to parse a response, but your call data is intact. "
    "Try again or adjust the request."
)
TRANSPORT_ERROR_TEXT = (
    "I hit an issue reaching the intelligence engine. Double-check the API key and try again."
)


class DashboardSession:
    """
    One user's dashboard: board state, transcript, and an HTTP client.

    Only one agent request runs at a time per session; a send attempted while
    another is in flight returns None without touching the transcript.
    """

    def __init__(self, store: BoardStore, http_client: httpx.Client):
        self.store = store
        self.http = http_client
        self._in_flight = threading.Lock()

    @classmethod
    def connect(cls, store: BoardStore, base_url: str = None, timeout: float = 45.0) -> "DashboardSession":
        client = httpx.Client(base_url=(base_url or config.BASE_URL).rstrip("/"), timeout=timeout)
        return cls(store, client)

    def close(self) -> None:
        self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    @property
    def thinking(self) -> bool:
        return self._in_flight.locked()

    def _post(self, messages: List[ChatMessage], state: BoardState) -> Dict[str, Any]:
        payload = {
            "messages": [message.model_dump(include={"role", "content"}) for message in messages],
            "state": state.model_dump(by_alias=True, exclude_none=True),
        }
        try:
            response = self.http.post(AGENT_PATH, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            raise ClientTransportError("Agent request failed", status_code=exc.response.status_code) from exc
        except httpx.HTTPError as exc:
            raise ClientTransportError(f"Agent request failed: {exc}") from exc
        except ValueError as exc:
            raise ClientTransportError("Agent response was not JSON") from exc
        return data if isinstance(data, dict) else {}

    def send_message(self, text: str) -> Optional[AgentMessage]:
        """
        Send a chat turn with the current board snapshot.

        Returns the assistant message appended to the transcript, or None when
        the input is blank or another request is already in flight.
        """
        content = (text or "").strip()
        if not content:
            return None
        if not self._in_flight.acquire(blocking=False):
            logger.info("chat_request_skipped", reason="request_in_flight")
            return None

        try:
            self.store.append_message(AgentMessage(id=new_id("user-"), role="user", content=content))
            history = [ChatMessage(role=m.role, content=m.content) for m in self.store.messages]

            try:
                data = self._post(history, self.store.snapshot())
            except ClientTransportError as exc:
                # Board state is left exactly as it was.
                logger.warning("chat_request_failed", error=str(exc), status_code=exc.status_code)
                return self.store.append_message(
                    AgentMessage(id=new_id("assistant-error-"), role="assistant", content=TRANSPORT_ERROR_TEXT)
                )

            reply = data.get("reply")
            if not isinstance(reply, str):
                reply = UNPARSEABLE_REPLY_TEXT
            return self.store.append_message(
                AgentMessage(id=new_id("assistant-"), role="assistant", content=reply)
            )
        finally:
            self._in_flight.release()

    def refresh_call_brief(self) -> Optional[str]:
        """
        Ask for a fresh brief on the selected call and store it in its notes.

        The request carries only the selected call; the transcript is not
        touched. Returns the new notes, or None if nothing was written.
        """
        selected = self.store.selected_call
        if selected is None:
            return None
        if not self._in_flight.acquire(blocking=False):
            logger.info("brief_request_skipped", reason="request_in_flight")
            return None

        try:
            prompt = (
                f"Generate a high-impact call brief for {selected.contact} at {selected.company}. "
                f"Focus on: {selected.focus}. Highlight risk, opportunity, and next steps."
            )
            state = BoardState(
                calls=[selected.model_copy(deep=True)],
                tasks=self.store.snapshot().tasks,
                selected_call_id=selected.id,
            )
            try:
                data = self._post([ChatMessage(role="user", content=prompt)], state)
            except ClientTransportError as exc:
                logger.warning("brief_request_failed", call_id=selected.id, error=str(exc))
                return None

            reply = data.get("reply")
            if not isinstance(reply, str):
                return None
            self.store.update_notes(selected.id, reply)
            return reply
        finally:
            self._in_flight.release()
