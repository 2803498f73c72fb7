"""Streaming decoder: a body of back-to-back JSON objects -> ordered StreamUnits.

The server frames streaming bodies as newline-delimited JSON, but nothing here
relies on the newline: values are pulled one at a time with
JSONDecoder.raw_decode from a growing text buffer, so objects written back to
back with no separator decode the same way.
"""

from __future__ import annotations

import codecs
import json
import logging
from typing import Any, AsyncIterable, AsyncIterator, TypeVar

import httpx
from pydantic import ValidationError

from ollama_client.core.errors import (
    DecodeError,
    IncompleteStreamError,
    ServerStreamError,
)
from ollama_client.protocol.responses import Record
from ollama_client.streaming.units import Fault, StreamUnit, Value

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)

_WS = " \t\n\r"

# Read failures that end a stream with a DecodeError fault.
READ_ERRORS = (httpx.HTTPError, httpx.StreamError, OSError)


class _Pending(Exception):
    """Buffer holds the beginning of a value; more bytes are needed."""


def _skip_ws(buf: str, pos: int) -> int:
    while pos < len(buf) and buf[pos] in _WS:
        pos += 1
    return pos


def _next_value(decoder: json.JSONDecoder, buf: str, pos: int, eof: bool) -> tuple[Any, int]:
    """Decode one value at buf[pos:]. Raises _Pending when it may still be incomplete."""
    try:
        return decoder.raw_decode(buf, pos)
    except json.JSONDecodeError as e:
        # A truncated value fails at (or inside the last token before) the end
        # of the buffer, and JSON tokens never contain a raw newline. A newline
        # after the failure point therefore means the value is broken for good.
        if eof or "\n" in buf[e.pos :]:
            raise DecodeError(f"malformed JSON in response body: {e}") from e
        raise _Pending from e


def _to_record(obj: Any, record_type: type[R]) -> R:
    if not isinstance(obj, dict):
        raise DecodeError(f"expected a JSON object, got {type(obj).__name__}")
    if "error" in obj and isinstance(obj["error"], str):
        raise ServerStreamError(obj["error"])
    try:
        return record_type.model_validate(obj)
    except ValidationError as e:
        raise DecodeError(f"cannot decode {record_type.__name__}: {e}") from e


async def decode_stream(
    chunks: AsyncIterable[bytes],
    record_type: type[R],
    *,
    strict_end: bool = True,
) -> AsyncIterator[StreamUnit[R]]:
    """Yield one unit per JSON value in `chunks`, in order.

    Stops after the first record whose is_final() is true. A malformed value,
    schema mismatch or read failure yields one Fault and stops. End of body
    before a final record yields an IncompleteStreamError fault when
    `strict_end`, otherwise the sequence just ends.
    """
    decoder = json.JSONDecoder()
    text = codecs.getincrementaldecoder("utf-8")()
    iterator = chunks.__aiter__()
    name = record_type.__name__
    buf = ""
    eof = False
    count = 0
    try:
        while True:
            pos = _skip_ws(buf, 0)
            if pos < len(buf):
                try:
                    obj, end = _next_value(decoder, buf, pos, eof)
                    record = _to_record(obj, record_type)
                except _Pending:
                    pass
                except DecodeError as e:
                    logger.warning(
                        "stream decode failed",
                        extra={"record_type": name, "index": count, "error": str(e)},
                    )
                    yield Fault(e)
                    return
                else:
                    buf = buf[end:]
                    count += 1
                    yield Value(record)
                    if record.is_final():
                        return
                    continue
            else:
                buf = ""

            # At eof any leftover was decoded or rejected above; only whitespace remains.
            if eof:
                break
            try:
                chunk = await iterator.__anext__()
                buf += text.decode(chunk)
            except StopAsyncIteration:
                eof = True
                try:
                    buf += text.decode(b"", final=True)
                except UnicodeDecodeError as e:
                    yield Fault(DecodeError(f"truncated UTF-8 at end of body: {e}"))
                    return
            except UnicodeDecodeError as e:
                yield Fault(DecodeError(f"invalid UTF-8 in response body: {e}"))
                return
            except READ_ERRORS as e:
                logger.warning(
                    "stream read failed",
                    extra={"record_type": name, "index": count, "error": str(e)},
                )
                yield Fault(DecodeError(f"error reading response body: {e}"))
                return

        if strict_end:
            logger.warning("stream ended without final record", extra={"record_type": name, "records": count})
            yield Fault(IncompleteStreamError(f"stream ended after {count} record(s) without a final record"))
    finally:
        aclose = getattr(iterator, "aclose", None)
        if aclose is not None:
            await aclose()


def decode_single(body: bytes, record_type: type[R]) -> R:
    """Decode a complete one-shot body. Raises DecodeError."""
    try:
        obj = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError(f"cannot decode {record_type.__name__}: {e}") from e
    return _to_record(obj, record_type)
