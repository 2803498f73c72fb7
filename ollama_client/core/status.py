"""Map HTTP statuses to StatusError."""

from __future__ import annotations

import json
import logging
from typing import Optional

import httpx

from ollama_client.core.errors import StatusError

logger = logging.getLogger(__name__)


def _error_message(body: bytes) -> str:
    """Server errors arrive as {"error": "..."}; fall back to the raw text."""
    if not body:
        return ""
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return body.decode("utf-8", errors="replace").strip()[:500]
    if isinstance(data, dict) and isinstance(data.get("error"), str):
        return data["error"]
    return ""


def status_error(status_code: int, reason: str, body: bytes = b"", url: Optional[str] = None) -> Optional[StatusError]:
    """None for 2xx, otherwise a StatusError carrying the status text and server message."""
    if 200 <= status_code < 300:
        return None
    return StatusError(status_code, reason, message=_error_message(body), url=url)


async def normalize_status(response: httpx.Response) -> Optional[StatusError]:
    """Check a (possibly streaming) response. Reads the body only on failure."""
    if response.is_success:
        return None
    try:
        body = await response.aread()
    except (httpx.HTTPError, httpx.StreamError) as e:
        logger.debug("could not read error body", extra={"error": str(e)})
        body = b""
    error = status_error(response.status_code, response.reason_phrase, body, url=str(response.request.url))
    logger.warning(
        "request failed",
        extra={"status_code": response.status_code, "url": str(response.request.url), "server_error": error.message},
    )
    return error
