"""Exceptions raised by the document pipeline."""

from __future__ import annotations

# Upper bound for error text returned to callers
MAX_ERROR_CHARS = 1500


def truncate(text: str, limit: int = MAX_ERROR_CHARS) -> str:
    return text if len(text) <= limit else text[:limit]


class SlideSpecError(Exception):
    """Base class for errors surfaced to callers of the pipeline."""

    status = 500


class InvalidDocumentError(ValueError, SlideSpecError):
    """Raised when the producer's output still fails validation after the retry."""

    status = 422

    def __init__(self, kind: str, errors: str):
        self.kind = kind
        self.errors = truncate(errors)
        super().__init__(f"Invalid {kind} document: {self.errors}")


class UpstreamError(SlideSpecError):
    """Raised when the producer boundary returns a non-success status."""

    def __init__(self, status: int, body: str = ""):
        self.status = status
        self.body = truncate(body)
        super().__init__(f"Upstream producer error ({status}): {self.body}")


class InvalidConversationError(ValueError, SlideSpecError):
    """Raised when a conversation turn is not a user/assistant message with text."""

    status = 400

    def __init__(self, index: int, reason: str):
        self.index = index
        self.reason = reason
        super().__init__(f"Invalid conversation turn {index}: {reason}")


class ProducerNotConfiguredError(SlideSpecError):
    """Raised when no producer credentials are available."""

    status = 503

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(
            "Producer is not configured. Set " + " / ".join(self.missing) + " in the environment."
        )


def status_for(exc: BaseException) -> int:
    """Map an exception to the HTTP-style status a host service should report."""
    if isinstance(exc, UpstreamError) and 400 <= exc.status <= 599:
        return exc.status
    if isinstance(exc, (InvalidDocumentError, InvalidConversationError, ProducerNotConfiguredError)):
        return exc.status
    return 500
