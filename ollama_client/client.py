"""Client for the Ollama HTTP API.

Each call goes Encoding -> Dispatched -> (Streaming) -> Completed/Failed.
Anything that fails before a body is available (EncodeError, TransportError,
StatusError) is raised from the call and no stream is produced. Streaming calls
return a ResponseStream whose worker owns the body; one-shot calls read and
decode the body on the caller's task.
"""

from __future__ import annotations

import logging
from typing import Optional, TypeVar

import httpx
from pydantic import BaseModel

from ollama_client.config.loader import ClientSettings
from ollama_client.core.errors import DecodeError, RequestBuildError, RequestSendError
from ollama_client.core.status import normalize_status
from ollama_client.protocol.encoder import encode_request
from ollama_client.protocol.requests import (
    ChatRequest,
    CopyRequest,
    CreateRequest,
    DeleteRequest,
    EmbedRequest,
    GenerateRequest,
    PullRequest,
    PushRequest,
    ShowRequest,
)
from ollama_client.protocol.responses import (
    ChatResponse,
    EmbedResponse,
    GenerateResponse,
    ListModelsResponse,
    ListRunningResponse,
    ProgressResponse,
    Record,
    ShowResponse,
    VersionResponse,
)
from ollama_client.streaming.decoder import READ_ERRORS, decode_single
from ollama_client.streaming.stream import ResponseStream

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)


class Client:
    """Ollama API client. Holds no per-call state, so one instance can serve concurrent callers.

    Transport, in order of preference: a shared ``http_client`` (the caller
    owns and closes it), an ``httpx`` ``transport`` (e.g. httpx.MockTransport),
    or the default network transport. Without a shared client each call opens
    and closes its own httpx.AsyncClient.
    """

    def __init__(
        self,
        config: Optional[ClientSettings] = None,
        *,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        config = config or ClientSettings()
        if base_url is not None:
            config = ClientSettings(
                base_url=base_url,
                timeout=config.timeout,
                strict_stream_end=config.strict_stream_end,
            )
        self._config = config
        self._transport = transport
        self._http_client = http_client

    @property
    def config(self) -> ClientSettings:
        return self._config

    @property
    def base_url(self) -> str:
        return self._config.base_url

    def _open(self) -> tuple[httpx.AsyncClient, bool]:
        if self._http_client is not None:
            return self._http_client, False
        return httpx.AsyncClient(transport=self._transport, timeout=self._config.timeout), True

    async def _dispatch(
        self, method: str, path: str, request: Optional[BaseModel] = None
    ) -> tuple[httpx.Response, Optional[httpx.AsyncClient]]:
        """Send the request and check its status. Returns the open response and the client to close, if owned."""
        body = encode_request(request) if request is not None else None
        url = self.base_url + path
        client, owned = self._open()
        try:
            headers = {"Accept": "application/json"}
            if body is not None:
                headers["Content-Type"] = "application/json"
            try:
                http_request = client.build_request(method, url, content=body, headers=headers)
            except (httpx.InvalidURL, httpx.UnsupportedProtocol, ValueError, TypeError) as e:
                raise RequestBuildError(f"cannot prepare HTTP {method} {path}: {e}", url=url) from e
            logger.debug("dispatching request", extra={"method": method, "url": url})
            try:
                response = await client.send(http_request, stream=True)
            except httpx.HTTPError as e:
                logger.warning("request not sent", extra={"method": method, "url": url, "error": str(e)})
                raise RequestSendError(f"cannot execute HTTP {method} {path}: {e}", url=url) from e
            error = await normalize_status(response)
            if error is not None:
                await response.aclose()
                raise error
        except BaseException:
            if owned:
                await client.aclose()
            raise
        return response, client if owned else None

    async def _stream(
        self, path: str, request: BaseModel, record_type: type[R]
    ) -> ResponseStream[R]:
        response, owned_client = await self._dispatch("POST", path, request)
        return ResponseStream(
            response,
            record_type,
            strict_end=self._config.strict_stream_end,
            on_close=owned_client.aclose if owned_client is not None else None,
        )

    async def _read(self, method: str, path: str, request: Optional[BaseModel] = None) -> bytes:
        response, owned_client = await self._dispatch(method, path, request)
        try:
            return await response.aread()
        except READ_ERRORS as e:
            raise DecodeError(f"error reading response body from {path}: {e}") from e
        finally:
            await response.aclose()
            if owned_client is not None:
                await owned_client.aclose()

    async def _call(
        self, method: str, path: str, record_type: type[R], request: Optional[BaseModel] = None
    ) -> R:
        return decode_single(await self._read(method, path, request), record_type)

    # Streaming endpoints

    async def generate(self, request: GenerateRequest) -> ResponseStream[GenerateResponse]:
        """POST /api/generate. With stream=False the server sends a single final record."""
        return await self._stream("/api/generate", request, GenerateResponse)

    async def chat(self, request: ChatRequest) -> ResponseStream[ChatResponse]:
        """POST /api/chat."""
        return await self._stream("/api/chat", request, ChatResponse)

    async def create_model(self, request: CreateRequest) -> ResponseStream[ProgressResponse]:
        return await self._stream("/api/create", request, ProgressResponse)

    async def pull_model(self, request: PullRequest) -> ResponseStream[ProgressResponse]:
        return await self._stream("/api/pull", request, ProgressResponse)

    async def push_model(self, request: PushRequest) -> ResponseStream[ProgressResponse]:
        return await self._stream("/api/push", request, ProgressResponse)

    # One-shot endpoints

    async def embed(self, request: EmbedRequest) -> EmbedResponse:
        return await self._call("POST", "/api/embed", EmbedResponse, request)

    async def list_models(self) -> ListModelsResponse:
        return await self._call("GET", "/api/tags", ListModelsResponse)

    async def list_running(self) -> ListRunningResponse:
        return await self._call("GET", "/api/ps", ListRunningResponse)

    async def show_model(self, request: ShowRequest) -> ShowResponse:
        return await self._call("POST", "/api/show", ShowResponse, request)

    async def delete_model(self, request: DeleteRequest) -> None:
        await self._read("DELETE", "/api/delete", request)

    async def copy_model(self, request: CopyRequest) -> None:
        await self._read("POST", "/api/copy", request)

    async def version(self) -> str:
        return (await self._call("GET", "/api/version", VersionResponse)).version
