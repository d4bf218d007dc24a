"""
Validation-retry loop around the producer.

One call to ``generate_document`` makes at most two producer calls.  The
first runs at temperature 0.2; if its output does not validate, a second
call at temperature 0.0 is made with the flattened validation errors and
the previous raw text appended to the transcript.  Whatever the second call
returns is final.
"""
import logging
from typing import List, Mapping, Optional, Sequence

from pydantic import BaseModel

from .errors import InvalidConversationError, InvalidDocumentError
from .models import DocumentKind
from .normalizer import normalize
from .producer import Message, Producer, safe_json_parse, strip_code_fences
from .prompts import CONTEXT_INSTRUCTION, RETRY_INSTRUCTION, task_prompt
from .validator import ValidationResult, validate_document

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 2
ATTEMPT_TEMPERATURES = (0.2, 0.0)
CONVERSATION_ROLES = ("user", "assistant")


def check_conversation(conversation: Sequence[Message]) -> List[Message]:
    """Return a clean copy of ``conversation`` or raise on the first malformed turn.

    Raises:
        InvalidConversationError: a turn is not a mapping, has a role other than
            user/assistant, or has empty or non-string content
    """
    if isinstance(conversation, (str, bytes)) or not isinstance(conversation, Sequence):
        raise InvalidConversationError(0, "conversation must be a list of messages")
    turns = []
    for index, turn in enumerate(conversation):
        if not isinstance(turn, Mapping):
            raise InvalidConversationError(index, "expected an object with role and content")
        role, content = turn.get("role"), turn.get("content")
        if role not in CONVERSATION_ROLES:
            raise InvalidConversationError(index, f"role must be one of {', '.join(CONVERSATION_ROLES)}")
        if not isinstance(content, str) or not content:
            raise InvalidConversationError(index, "content must be a non-empty string")
        turns.append({"role": role, "content": content})
    return turns


def build_messages(
    kind: DocumentKind,
    conversation: Sequence[Message],
    current_html: Optional[str] = None,
) -> List[Message]:
    """Assemble the base transcript for one producer invocation.

    Args:
        kind: Target document variant
        conversation: Prior user/assistant turns, passed through verbatim
        current_html: Optional page the user is working from

    Returns:
        list: system instruction, optional context, conversation, shape instruction
    """
    prompt = task_prompt(kind)
    messages: List[Message] = [{"role": "system", "content": prompt.system}]
    if current_html:
        messages.append({"role": "user", "content": CONTEXT_INSTRUCTION.format(html=current_html)})
    messages.extend(check_conversation(conversation))
    messages.append({"role": "user", "content": prompt.shape})
    return messages


def retry_message(errors: str, previous: str) -> Message:
    return {"role": "user", "content": RETRY_INSTRUCTION.format(errors=errors, previous=previous)}


def evaluate(kind: DocumentKind, raw_text: str) -> ValidationResult:
    """Strip fences, parse, normalize and validate one raw producer response."""
    candidate = safe_json_parse(strip_code_fences(raw_text))
    if candidate is not None:
        candidate = normalize(kind, candidate)
    return validate_document(kind, candidate)


def generate_document(
    kind: DocumentKind,
    producer: Producer,
    conversation: Sequence[Message],
    current_html: Optional[str] = None,
) -> BaseModel:
    """Ask ``producer`` for a ``kind`` document and return it validated.

    Raises:
        InvalidConversationError: a conversation turn is malformed
        InvalidDocumentError: both attempts produced invalid output
        UpstreamError: the producer boundary failed; never retried here
    """
    kind = DocumentKind(kind)
    base_messages = build_messages(kind, conversation, current_html)

    last_content = ""
    last_errors = ""
    for attempt in range(MAX_ATTEMPTS):
        messages = list(base_messages)
        if attempt > 0:
            messages.append(retry_message(last_errors, last_content))
            logger.info("Retrying %s document after validation failure", kind.value)

        raw = producer.complete(messages, ATTEMPT_TEMPERATURES[attempt])
        last_content = strip_code_fences(raw)

        result = evaluate(kind, raw)
        if result.ok:
            logger.debug("%s document validated on attempt %d", kind.value, attempt + 1)
            return result.value
        last_errors = result.flatten()

    logger.warning("%s document still invalid after %d attempts", kind.value, MAX_ATTEMPTS)
    raise InvalidDocumentError(kind.value, last_errors)
