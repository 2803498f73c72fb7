"""Error taxonomy for the Ollama client.

Failures before streaming starts (encode, transport, status) are raised from the
call itself. Failures while decoding a body are DecodeError and, for streaming
calls, travel inside the stream as a Fault unit instead of being raised.
"""

from __future__ import annotations


class OllamaError(Exception):
    """Base class for every error raised or delivered by this package."""


class EncodeError(OllamaError):
    """Request could not be serialized to JSON."""


class TransportError(OllamaError):
    """HTTP exchange could not be constructed or executed."""

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class RequestBuildError(TransportError):
    """HTTP request could not be constructed (bad URL, bad headers)."""


class RequestSendError(TransportError):
    """HTTP request was built but sending it failed (connect error, timeout)."""


class StatusError(OllamaError):
    """Server answered with a non-2xx status."""

    def __init__(
        self,
        status_code: int,
        reason: str,
        *,
        message: str = "",
        url: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        self.message = message
        self.url = url
        super().__init__(str(self))

    @property
    def status(self) -> str:
        """Status line text, e.g. '500 Internal Server Error'."""
        return f"{self.status_code} {self.reason}".strip()

    def __str__(self) -> str:
        parts = [self.status]
        if self.message:
            parts.append(self.message)
        if self.url:
            parts.append(f"url={self.url}")
        return " ".join(parts)


class DecodeError(OllamaError):
    """Body could not be decoded: malformed JSON, schema mismatch or a read failure."""


class IncompleteStreamError(DecodeError):
    """Stream hit end-of-body before a final record arrived."""


class StreamCancelledError(DecodeError):
    """Stream was cancelled before it finished."""


class ServerStreamError(DecodeError):
    """Server reported an error in-band, as an {"error": ...} object in the body."""
