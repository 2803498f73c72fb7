"""Tests for the streaming decoder: framing, ordering, faults and end-of-stream handling."""

import json

import httpx
import pytest

from ollama_client.core.errors import (
    DecodeError,
    IncompleteStreamError,
    ServerStreamError,
)
from ollama_client.protocol.responses import ChatResponse, GenerateResponse, ProgressResponse
from ollama_client.streaming.decoder import decode_single, decode_stream
from ollama_client.streaming.units import Fault, Value


class Chunks:
    """Async byte-chunk iterator that records how often it was closed."""

    def __init__(self, *parts: bytes, error: Exception | None = None) -> None:
        self._parts = list(parts)
        self._error = error
        self.close_calls = 0

    def __aiter__(self):
        return self

    async def __anext__(self) -> bytes:
        if self._parts:
            return self._parts.pop(0)
        if self._error is not None:
            raise self._error
        raise StopAsyncIteration

    async def aclose(self) -> None:
        self.close_calls += 1


def _gen(response: str, done: bool = False) -> bytes:
    return json.dumps({"model": "m", "response": response, "done": done}, ensure_ascii=False).encode()


async def _decode(chunks, record_type=GenerateResponse, **kwargs):
    return [unit async for unit in decode_stream(chunks, record_type, **kwargs)]


@pytest.mark.asyncio
async def test_back_to_back_objects_keep_order():
    body = _gen("a") + _gen("b") + _gen("c") + _gen("", done=True)
    units = await _decode(Chunks(body))
    assert all(isinstance(u, Value) for u in units)
    assert [u.record.response for u in units] == ["a", "b", "c", ""]
    assert [u.record.done for u in units] == [False, False, False, True]


@pytest.mark.asyncio
async def test_newline_delimited_body():
    body = b"\n".join([_gen("Hel"), _gen("lo"), _gen("", done=True)]) + b"\n"
    units = await _decode(Chunks(body))
    assert "".join(u.record.response for u in units) == "Hello"


@pytest.mark.asyncio
async def test_values_split_across_chunks():
    body = _gen("привет") + b"\n" + _gen("!", done=True)
    # Split every 7 bytes: cuts through keys, literals and multi-byte characters.
    parts = [body[i : i + 7] for i in range(0, len(body), 7)]
    units = await _decode(Chunks(*parts))
    assert [u.record.response for u in units] == ["привет", "!"]
    assert units[-1].record.done is True


@pytest.mark.asyncio
async def test_truncated_literal_waits_for_more_bytes():
    units = await _decode(Chunks(b'{"model":"m","done":tr', b"ue}"))
    assert len(units) == 1
    assert units[0].record.done is True


@pytest.mark.asyncio
async def test_stops_after_final_record_and_closes_source():
    chunks = Chunks(_gen("x", done=True) + _gen("ignored"), b"never read")
    units = await _decode(chunks)
    assert len(units) == 1
    assert chunks.close_calls == 1
    assert chunks._parts == [b"never read"]


@pytest.mark.asyncio
async def test_malformed_line_yields_one_fault_and_stops():
    body = _gen("ok") + b"\n" + b'{"model": nope}\n' + _gen("", done=True)
    units = await _decode(Chunks(body))
    assert isinstance(units[0], Value)
    assert len(units) == 2
    assert isinstance(units[1], Fault)
    assert isinstance(units[1].error, DecodeError)
    assert not isinstance(units[1].error, IncompleteStreamError)


@pytest.mark.asyncio
async def test_truncated_value_at_eof_is_decode_error():
    units = await _decode(Chunks(_gen("ok"), b'{"model":"m","done":'))
    assert isinstance(units[-1], Fault)
    assert "malformed" in str(units[-1].error)


@pytest.mark.asyncio
async def test_eof_without_final_record_strict():
    chunks = Chunks(_gen("a"), _gen("b"))
    units = await _decode(chunks)
    assert [u.ok for u in units] == [True, True, False]
    assert isinstance(units[-1].error, IncompleteStreamError)
    assert chunks.close_calls == 1


@pytest.mark.asyncio
async def test_eof_without_final_record_lenient():
    units = await _decode(Chunks(_gen("a"), _gen("b")), strict_end=False)
    assert [u.record.response for u in units] == ["a", "b"]


@pytest.mark.asyncio
async def test_empty_body():
    strict = await _decode(Chunks())
    assert len(strict) == 1 and isinstance(strict[0].error, IncompleteStreamError)
    assert await _decode(Chunks(b"  \n"), strict_end=False) == []


@pytest.mark.asyncio
async def test_in_band_server_error():
    units = await _decode(Chunks(_gen("a") + b'\n{"error":"model crashed"}\n'))
    assert units[0].ok
    assert isinstance(units[1].error, ServerStreamError)
    assert str(units[1].error) == "model crashed"


@pytest.mark.asyncio
async def test_schema_mismatch_is_decode_error():
    units = await _decode(Chunks(b'{"model":"m","done":"maybe"}'))
    assert len(units) == 1
    assert isinstance(units[0].error, DecodeError)


@pytest.mark.asyncio
async def test_non_object_value_is_decode_error():
    units = await _decode(Chunks(b"[1, 2]\n"))
    assert isinstance(units[0].error, DecodeError)


@pytest.mark.asyncio
async def test_read_failure_mid_stream():
    chunks = Chunks(_gen("a"), error=httpx.ReadError("connection reset"))
    units = await _decode(chunks)
    assert units[0].ok
    assert isinstance(units[1].error, DecodeError)
    assert "connection reset" in str(units[1].error)
    assert len(units) == 2


@pytest.mark.asyncio
async def test_invalid_utf8():
    units = await _decode(Chunks(b'{"model":"\xff"}'))
    assert isinstance(units[0].error, DecodeError)


@pytest.mark.asyncio
async def test_chat_record_fields():
    body = b'{"model":"test","message":{"role":"assistant","content":"hello"},"done":true,"total_duration":1000}'
    (unit,) = await _decode(Chunks(body), ChatResponse)
    assert unit.record.message.content == "hello"
    assert unit.record.message.role == "assistant"
    assert unit.record.total_duration == 1000
    assert unit.record.duration.total_seconds() == pytest.approx(1e-6)


@pytest.mark.asyncio
async def test_progress_stream_ends_on_success_status():
    body = b'{"status":"pulling manifest"}\n{"status":"downloading","total":10,"completed":5}\n{"status":"success"}\n'
    units = await _decode(Chunks(body), ProgressResponse)
    assert [u.record.status for u in units] == ["pulling manifest", "downloading", "success"]
    assert units[1].record.completed == 5


def test_decode_single_ok_and_failure():
    rec = decode_single(b'{"model":"m","response":"r","done":true}', GenerateResponse)
    assert rec.response == "r"
    with pytest.raises(DecodeError):
        decode_single(b"{not json", GenerateResponse)
    with pytest.raises(ServerStreamError):
        decode_single(b'{"error":"nope"}', GenerateResponse)
