"""Sampling/generation parameters sent as the "options" object of generate and chat."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_serializer


class ModelOptions(BaseModel):
    """Generation knobs. A field left at zero is never transmitted, so the server default applies.

    The server cannot tell "0" from "unset" for these fields; the client keeps it
    that way by dropping zero values even when they were set explicitly.
    """

    model_config = ConfigDict(frozen=True)

    mirostat: int = Field(default=0, description="0 = disabled, 1 = Mirostat, 2 = Mirostat 2.0")
    mirostat_eta: float = Field(default=0.0, description="Mirostat learning rate")
    mirostat_tau: float = Field(default=0.0, description="Coherence vs. diversity balance")
    num_ctx: int = Field(default=0, description="Context window size")
    repeat_last_n: int = Field(default=0, description="Look-back for repetition; -1 = num_ctx")
    repeat_penalty: float = 0.0
    temperature: float = 0.0
    seed: int = 0
    stop: str = Field(default="", description="Stop sequence")
    tfs_z: float = Field(default=0.0, description="Tail free sampling; 1.0 disables")
    num_predict: int = Field(default=0, description="Max tokens; -1 = infinite")
    top_k: int = 0
    top_p: float = 0.0
    min_p: float = 0.0

    @model_serializer(mode="plain")
    def _non_zero(self) -> dict[str, Any]:
        return {
            name: value
            for name in type(self).model_fields
            if (value := getattr(self, name))
        }

    def is_empty(self) -> bool:
        return not self.model_dump()
