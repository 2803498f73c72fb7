"""Load client configuration from YAML and environment variables."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Default config lives next to this module
_DEFAULT_CONFIG_PATH = Path(__file__).parent / "default.yaml"

DEFAULT_BASE_URL = "http://localhost:11434"


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def normalize_base_url(value: str) -> str:
    """Accept OLLAMA_HOST-style values ('localhost:11434', '0.0.0.0') as base URLs."""
    u = (value or "").strip().rstrip("/")
    if not u:
        return DEFAULT_BASE_URL
    if "://" in u:
        return u
    host, sep, path = u.partition("/")
    if ":" not in host:
        host += ":11434"
    return f"http://{host}{sep}{path}"


class ClientSettings(BaseSettings):
    """Immutable client configuration: where the server lives and how calls behave."""

    model_config = SettingsConfigDict(env_prefix="OLLAMA_", extra="ignore", frozen=True)

    base_url: str = DEFAULT_BASE_URL
    timeout: Optional[float] = Field(default=None, description="Seconds; None waits forever")
    strict_stream_end: bool = Field(
        default=True,
        description="Deliver IncompleteStreamError when a stream ends without a final record",
    )

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, v: str) -> str:
        return normalize_base_url(v)


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LOG_", extra="ignore")
    level: str = "INFO"
    json_format: bool = True


class Config(BaseSettings):
    """Application config: YAML + env."""

    model_config = SettingsConfigDict(env_nested_delimiter="__", extra="ignore")

    client: ClientSettings = Field(default_factory=ClientSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> "Config":
        """default.yaml, then the file at `config_path` over it, then env overrides."""
        data = _load_yaml(_DEFAULT_CONFIG_PATH)
        if config_path:
            data = _deep_merge(data, _load_yaml(Path(config_path)))
        return cls(**_deep_merge(data, _env_overrides()))


def _env_overrides() -> dict[str, Any]:
    client: dict[str, Any] = {}
    # The server itself reads OLLAMA_HOST, so the client honours it too.
    if os.getenv("OLLAMA_HOST"):
        client["base_url"] = os.environ["OLLAMA_HOST"]
    if os.getenv("OLLAMA_BASE_URL"):
        client["base_url"] = os.environ["OLLAMA_BASE_URL"]
    # Raw strings: pydantic validates and coerces them like YAML values.
    if os.getenv("OLLAMA_TIMEOUT"):
        client["timeout"] = os.environ["OLLAMA_TIMEOUT"]
    if os.getenv("OLLAMA_STRICT_STREAM_END"):
        client["strict_stream_end"] = os.environ["OLLAMA_STRICT_STREAM_END"]
    overrides: dict[str, Any] = {}
    if client:
        overrides["client"] = client
    if os.getenv("LOG_LEVEL"):
        overrides["logging"] = {"level": os.environ["LOG_LEVEL"]}
    return overrides


def get_config(config_path: str | Path | None = None) -> Config:
    return Config.load(config_path)
