"""Request encoder: typed request -> compact JSON bytes."""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import BaseModel
from pydantic_core import PydanticSerializationError

from ollama_client.core.errors import EncodeError

logger = logging.getLogger(__name__)


def _payload(request: BaseModel) -> dict[str, Any]:
    data = request.model_dump(mode="python", by_alias=True, exclude_none=True)
    # An options bag with nothing set is left out entirely.
    if data.get("options") == {}:
        del data["options"]
    return data


def encode_request(request: BaseModel) -> bytes:
    """Serialize a request. Unset optionals and zero options never reach the wire.

    Output is deterministic: same field values, same bytes.
    """
    try:
        payload = _payload(request)
        raw = json.dumps(payload, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (PydanticSerializationError, TypeError, ValueError) as e:
        logger.warning("request encode failed", extra={"request_type": type(request).__name__})
        raise EncodeError(f"cannot encode {type(request).__name__}: {e}") from e
    return raw.encode("utf-8")
