"""Structured logging for the client. Prompts, credentials and secrets stay out of log output."""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Any

# Attributes every LogRecord carries; anything else on a record came in through extra={...}.
_RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}

_SENSITIVE = ("authorization", "bearer", "api_key", "apikey", "password", "secret", "token=")
_SENSITIVE_KEYS = ("authorization", "api_key", "prompt", "messages")

# user:password@ in a base URL
_URL_USERINFO = re.compile(r"(?<=://)[^/@\s]+@")

MAX_FIELD_LEN = 1000

# Transport libraries that log every request at INFO.
_CHATTY = ("httpx", "httpcore")


def _redact(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {
            k: "[REDACTED]" if str(k).lower() in _SENSITIVE_KEYS else _redact(v)
            for k, v in obj.items()
        }
    if isinstance(obj, (list, tuple)):
        return [_redact(v) for v in obj]
    if isinstance(obj, str):
        if any(s in obj.lower() for s in _SENSITIVE):
            return "[REDACTED]"
        obj = _URL_USERINFO.sub("[REDACTED]@", obj)
        if len(obj) > MAX_FIELD_LEN:
            return obj[:MAX_FIELD_LEN] + f"...[{len(obj) - MAX_FIELD_LEN} more]"
    return obj


class StructuredFormatter(logging.Formatter):
    """One line per record, JSON or key=value. extra={...} fields are merged in, redacted."""

    def __init__(self, use_json: bool = True) -> None:
        super().__init__()
        self.use_json = use_json

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, _redact(value))
            for key, value in record.__dict__.items()
            if key not in _RESERVED and key not in _SENSITIVE_KEYS
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        if self.use_json:
            return json.dumps(entry, default=str, ensure_ascii=False)
        return " ".join(f"{k}={v!r}" for k, v in entry.items())


def setup_logging(level: str = "INFO", use_json: bool = True) -> None:
    """Configure the root logger once; later calls only change levels.

    Logs go to stderr so streamed model output on stdout stays clean.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(StructuredFormatter(use_json=use_json))
        root.addHandler(handler)
    chatty_level = logging.NOTSET if root.level <= logging.DEBUG else logging.WARNING
    for name in _CHATTY:
        logging.getLogger(name).setLevel(chatty_level)
