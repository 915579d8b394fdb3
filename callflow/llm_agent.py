"""
Completion proxy core: one validated agent request in, one model reply out.
"""

from datetime import tzinfo
from typing import Any, Optional
from zoneinfo import ZoneInfoNotFoundError

from openai import OpenAI

from callflow.config import config
from callflow.context import build_completion_messages
from callflow.exceptions import ConfigurationError, UpstreamError
from callflow.formatting import resolve_timezone
from callflow.logging_config import get_logger
from callflow.models import AgentRequest

logger = get_logger(__name__)

EMPTY_REPLY_FALLBACK = "No response generated. Re-run your last request."

# Created on first use so the credential is read from the live config.
_client: Optional[OpenAI] = None
_client_key: str = ""


def get_client() -> OpenAI:
    """Return the shared OpenAI client, rebuilding it if the key changed."""
    global _client, _client_key

    if _client is None or _client_key != config.OPENAI_API_KEY:
        _client = OpenAI(
            api_key=config.OPENAI_API_KEY,
            max_retries=0,
            timeout=config.OPENAI_TIMEOUT_SECONDS,
        )
        _client_key = config.OPENAI_API_KEY
    return _client


def display_timezone() -> tzinfo:
    try:
        return resolve_timezone(config.DISPLAY_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(f"Unknown DISPLAY_TIMEZONE '{config.DISPLAY_TIMEZONE}'.") from exc


def _reply_text(completion: Any) -> str:
    """First choice's text, or the fallback when the model produced nothing."""
    choices = completion.choices
    if not choices:
        return EMPTY_REPLY_FALLBACK
    content = choices[0].message.content
    if not isinstance(content, str) or not content.strip():
        return EMPTY_REPLY_FALLBACK
    return content


def generate_reply(request: AgentRequest) -> str:
    """
    Forward an agent request to the completion model.

    Args:
        request: validated conversation plus board snapshot

    Returns:
        Non-empty reply text.

    Raises:
        ConfigurationError: no OpenAI key is configured; nothing is sent.
        UpstreamError: the single model call failed or returned garbage.
    """
    if not config.has_openai_key():
        logger.error("agent_request_unconfigured")
        raise ConfigurationError()

    messages = build_completion_messages(request, display_timezone())

    try:
        completion = get_client().chat.completions.create(
            model=config.OPENAI_MODEL,
            temperature=config.OPENAI_TEMPERATURE,
            max_tokens=config.OPENAI_MAX_TOKENS,
            messages=messages,
        )
        reply = _reply_text(completion)
    except Exception as exc:
        logger.error(
            "agent_completion_failed",
            model=config.OPENAI_MODEL,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        raise UpstreamError() from exc

    logger.info(
        "agent_reply_generated",
        model=config.OPENAI_MODEL,
        message_count=len(request.messages),
        reply_chars=len(reply),
    )
    return reply
