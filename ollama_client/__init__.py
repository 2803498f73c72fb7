"""Async client for the Ollama HTTP API with streaming response decoding."""

from ollama_client.client import Client
from ollama_client.config.loader import ClientSettings
from ollama_client.core.errors import (
    DecodeError,
    EncodeError,
    IncompleteStreamError,
    OllamaError,
    RequestBuildError,
    RequestSendError,
    ServerStreamError,
    StatusError,
    StreamCancelledError,
    TransportError,
)
from ollama_client.protocol.options import ModelOptions
from ollama_client.protocol.requests import (
    ChatMessage,
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
    ModelDetails,
    ModelInfo,
    ProgressResponse,
    RunningModel,
    ShowResponse,
)
from ollama_client.streaming.stream import ResponseStream
from ollama_client.streaming.units import Fault, StreamUnit, Value

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "Client",
    "ClientSettings",
    "CopyRequest",
    "CreateRequest",
    "DecodeError",
    "DeleteRequest",
    "EmbedRequest",
    "EmbedResponse",
    "EncodeError",
    "Fault",
    "GenerateRequest",
    "GenerateResponse",
    "IncompleteStreamError",
    "ListModelsResponse",
    "ListRunningResponse",
    "ModelDetails",
    "ModelInfo",
    "ModelOptions",
    "OllamaError",
    "ProgressResponse",
    "PullRequest",
    "PushRequest",
    "RequestBuildError",
    "RequestSendError",
    "ResponseStream",
    "RunningModel",
    "ServerStreamError",
    "ShowRequest",
    "ShowResponse",
    "StatusError",
    "StreamCancelledError",
    "StreamUnit",
    "TransportError",
    "Value",
]
