"""Request bodies, one model per endpoint. Frozen: built once, encoded once."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ollama_client.protocol.options import ModelOptions


class _Request(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    role: str
    content: str = ""


class GenerateRequest(_Request):
    model: str
    prompt: Optional[str] = None
    options: Optional[ModelOptions] = None
    stream: Optional[bool] = None


class ChatRequest(_Request):
    model: str
    messages: list[ChatMessage] = Field(default_factory=list)
    stream: Optional[bool] = None
    options: Optional[ModelOptions] = None


class EmbedRequest(_Request):
    model: str
    input: list[str] = Field(default_factory=list)


class ShowRequest(_Request):
    model: str
    verbose: Optional[bool] = None


class DeleteRequest(_Request):
    model: str


class CopyRequest(_Request):
    source: str
    destination: str


class CreateRequest(_Request):
    model: str
    from_: Optional[str] = Field(default=None, alias="from")
    files: Optional[dict[str, str]] = None
    system: Optional[str] = None
    template: Optional[str] = None
    quantize: Optional[str] = None
    stream: Optional[bool] = None


class PullRequest(_Request):
    model: str
    insecure: Optional[bool] = None
    stream: Optional[bool] = None


class PushRequest(_Request):
    model: str
    insecure: Optional[bool] = None
    stream: Optional[bool] = None
