"""StreamUnit: one element of a response stream, either a decoded record or a terminal fault."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from ollama_client.core.errors import OllamaError

R = TypeVar("R")


@dataclass(frozen=True)
class Value(Generic[R]):
    """A decoded record."""

    record: R

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> R:
        return self.record


@dataclass(frozen=True)
class Fault:
    """Terminal failure. Always the last unit of its stream."""

    error: OllamaError

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self):
        raise self.error


StreamUnit = Union[Value[R], Fault]
