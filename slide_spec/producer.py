"""
Producer boundary: the chat-completions transport and its debug record.

The orchestrator only depends on the ``Producer`` protocol, so tests (and
any other backend) can plug in a scripted object with a ``complete`` method.
"""
import json
import logging
import re
import threading
from collections import deque
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol

import requests

from .config import DEFAULT_DEBUG_HISTORY, ProducerSettings
from .errors import UpstreamError

logger = logging.getLogger(__name__)

Message = Dict[str, str]

# Keep recorded responses bounded when a producer echoes large HTML back
MAX_DEBUG_TEXT = 60_000
TRUNCATED_MARKER = "\n...[truncated]"


class Producer(Protocol):
    """Anything that turns a chat transcript into raw model text."""

    def complete(self, messages: List[Message], temperature: float) -> str:
        ...


# ---------------------------------------------------------------------------
# Raw text helpers
# ---------------------------------------------------------------------------

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```\s*$")


def strip_code_fences(content: str) -> str:
    """Remove a surrounding Markdown code fence (```json ... ```) if present."""
    text = (content or "").strip()
    text = _FENCE_OPEN.sub("", text, count=1)
    text = _FENCE_CLOSE.sub("", text, count=1)
    return text.strip()


def safe_json_parse(text: str) -> Any:
    """Parse JSON text, returning ``None`` instead of raising on bad input."""
    try:
        return json.loads(text)
    except (TypeError, ValueError, RecursionError):
        return None


def extract_message_content(payload: Any) -> str:
    """Return ``choices[0].message.content`` from a chat-completions body, or ``""``."""
    if not isinstance(payload, dict):
        return ""
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    return content if isinstance(content, str) else ""


# ---------------------------------------------------------------------------
# Debug record
# ---------------------------------------------------------------------------

@dataclass
class DebugEntry:
    at: str
    request_url: str
    request_body: Dict[str, Any]
    response_status: int
    response_text: str
    response_json: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class DebugRecorder:
    """Bounded, thread-safe history of recent producer exchanges.

    Diagnostic only; nothing in the pipeline reads it back.
    """

    def __init__(self, maxlen: int = DEFAULT_DEBUG_HISTORY):
        self._entries = deque(maxlen=maxlen)
        self._lock = threading.Lock()

    def record(self, entry: DebugEntry) -> DebugEntry:
        if len(entry.response_text) > MAX_DEBUG_TEXT:
            entry.response_text = entry.response_text[:MAX_DEBUG_TEXT] + TRUNCATED_MARKER
        with self._lock:
            self._entries.append(entry)
        return entry

    def last(self) -> Optional[DebugEntry]:
        with self._lock:
            return self._entries[-1] if self._entries else None

    def entries(self) -> List[DebugEntry]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


# ---------------------------------------------------------------------------
# Azure OpenAI transport
# ---------------------------------------------------------------------------

class AzureOpenAIProducer:
    """Chat-completions client for an Azure OpenAI deployment.

    Args:
        settings: Endpoint, key, deployment and API version
        recorder: Optional debug record receiving every exchange
        timeout: Request timeout in seconds
        session: Optional ``requests.Session`` (shared connection pool, tests)
    """

    def __init__(
        self,
        settings: ProducerSettings,
        recorder: Optional[DebugRecorder] = None,
        timeout: float = 120.0,
        session: Optional[requests.Session] = None,
    ):
        self.settings = settings
        self.recorder = recorder
        self.timeout = timeout
        self.session = session or requests.Session()

    def complete(self, messages: List[Message], temperature: float) -> str:
        url = self.settings.chat_completions_url
        body = {"messages": messages, "temperature": temperature}
        headers = {
            "Content-Type": "application/json",
            "api-key": self.settings.api_key,
        }

        logger.debug("POST %s (%d messages, temperature=%s)", url, len(messages), temperature)
        try:
            response = self.session.post(url, json=body, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Producer request failed: %s", exc)
            raise UpstreamError(502, str(exc)) from exc

        text = response.text
        payload = safe_json_parse(text)
        if self.recorder is not None:
            self.recorder.record(
                DebugEntry(
                    at=datetime.now(timezone.utc).isoformat(),
                    request_url=url,
                    request_body=body,
                    response_status=response.status_code,
                    response_text=text,
                    response_json=payload,
                )
            )

        if not response.ok:
            logger.warning("Producer returned HTTP %d", response.status_code)
            raise UpstreamError(response.status_code, text)

        return extract_message_content(payload)
