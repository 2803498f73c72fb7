"""Response records decoded from the wire.

Streaming endpoints decode many partial records per call; is_final() tells the
decoder which one ends the stream. One-shot records are final by definition.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ollama_client.protocol.requests import ChatMessage


class Record(BaseModel):
    model_config = ConfigDict(extra="ignore")

    def is_final(self) -> bool:
        return True


class _Timed(Record):
    total_duration: int = Field(default=0, description="Nanoseconds")

    @property
    def duration(self) -> timedelta:
        return timedelta(microseconds=self.total_duration / 1000)


class GenerateResponse(_Timed):
    model: str = ""
    created_at: Optional[datetime] = None
    response: str = ""
    done: bool = False
    done_reason: Optional[str] = None
    load_duration: int = 0
    prompt_eval_count: int = 0
    prompt_eval_duration: int = 0
    eval_count: int = 0
    eval_duration: int = 0
    context: list[int] = Field(default_factory=list)

    def is_final(self) -> bool:
        return self.done


class ChatResponse(_Timed):
    model: str = ""
    created_at: Optional[datetime] = None
    message: ChatMessage = Field(default_factory=lambda: ChatMessage(role="assistant"))
    done: bool = False
    done_reason: Optional[str] = None
    load_duration: int = 0
    prompt_eval_count: int = 0
    eval_count: int = 0
    eval_duration: int = 0

    def is_final(self) -> bool:
        return self.done


class ProgressResponse(Record):
    """Status line of a create/pull/push stream."""

    status: str = ""
    digest: str = ""
    total: int = 0
    completed: int = 0

    def is_final(self) -> bool:
        return self.status == "success"


class EmbedResponse(_Timed):
    model: str = ""
    embeddings: list[list[float]] = Field(default_factory=list)
    load_duration: int = 0
    prompt_eval_count: int = 0


class ModelInfo(Record):
    name: str
    model: str = ""
    modified_at: Optional[datetime] = None
    size: int = 0
    digest: str = ""


class ListModelsResponse(Record):
    models: list[ModelInfo] = Field(default_factory=list)


class RunningModel(Record):
    name: str
    model: str = ""
    size: int = 0
    size_vram: int = 0
    digest: str = ""
    expires_at: Optional[datetime] = None


class ListRunningResponse(Record):
    models: list[RunningModel] = Field(default_factory=list)


class ModelDetails(Record):
    format: str = ""
    parameter_size: str = ""
    quantization_level: str = ""
    family: str = ""
    families: list[str] = Field(default_factory=list)


class ShowResponse(Record):
    modelfile: str = ""
    parameters: str = ""
    template: str = ""
    details: ModelDetails = Field(default_factory=ModelDetails)


class VersionResponse(Record):
    version: str = ""
