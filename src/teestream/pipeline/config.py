"""
Replication pipeline configuration.

Values come from keyword arguments, a YAML/JSON file, or ``TEESTREAM_*``
environment variables.
"""

from __future__ import annotations

import json
import os
from enum import Enum
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from teestream.errors import ConfigError
from teestream.scan.scanner import INITIAL_BUFFER_SIZE, MAX_EMPTY_TOKENS, MAX_TOKEN_SIZE
from teestream.scan.split import SplitFunc, get_split_function
from teestream.stream.base import DEFAULT_CHUNK_SIZE

ENV_PREFIX = "TEESTREAM_"

# Enum-like settings matched without regard to case when read from the environment.
_CASE_INSENSITIVE_FIELDS = frozenset({"split", "strategy"})


class ReplicationStrategy(str, Enum):
    """How bytes get from the source to the sinks."""

    TEE = "tee"
    """Pull through a chain of Duplicators, one per sink"""

    COPY = "copy"
    """Eager bulk copy of each block to every sink"""

    PARALLEL = "parallel"
    """Write each chunk to all sinks concurrently"""


class ReplicationConfig(BaseModel):
    """Settings for a ReplicationPipeline and its Tokenizer."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    chunk_size: int = Field(
        default=DEFAULT_CHUNK_SIZE, gt=0, description="Read size when draining"
    )
    initial_buffer_size: int = Field(
        default=INITIAL_BUFFER_SIZE, gt=0, description="First tokenizer buffer allocation"
    )
    max_token_size: int = Field(
        default=MAX_TOKEN_SIZE, gt=0, description="Largest token the tokenizer accepts"
    )
    max_empty_tokens: int = Field(
        default=MAX_EMPTY_TOKENS,
        ge=0,
        description="Consecutive empty tokens tolerated at end-of-stream",
    )
    split: Literal["words", "lines", "bytes", "runes"] = Field(
        default="lines", description="Standard split function used by tokens()"
    )
    strategy: ReplicationStrategy = Field(
        default=ReplicationStrategy.TEE, description="Replication strategy"
    )
    max_workers: int | None = Field(
        default=None, gt=0, description="Writer threads for the parallel strategy"
    )

    def split_function(self) -> SplitFunc:
        """Resolve the configured split function."""
        return get_split_function(self.split)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReplicationConfig:
        """Validate a mapping of settings.

        Raises:
            ConfigError: If a value is missing, unknown or out of range
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or None
            raise ConfigError(
                f"invalid replication config: {first['msg']}", field=field, cause=e
            ) from e

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX) -> ReplicationConfig:
        """Create configuration from environment variables.

        Each field maps to ``{prefix}{FIELD_NAME}``, e.g.
        ``TEESTREAM_CHUNK_SIZE=65536`` or ``TEESTREAM_STRATEGY=copy``.
        Unset variables keep their defaults. ``STRATEGY`` and ``SPLIT`` are
        case-insensitive.
        """
        data: dict[str, Any] = {}
        for name in cls.model_fields:
            value = os.getenv(f"{prefix}{name.upper()}")
            if value is None or value == "":
                continue
            if name in _CASE_INSENSITIVE_FIELDS:
                value = value.strip().lower()
            data[name] = value
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: str | Path) -> ReplicationConfig:
        """Load configuration from a YAML or JSON file.

        Raises:
            ConfigError: If the file cannot be read or parsed
        """
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"cannot read config file {path}: {e}", cause=e) from e

        try:
            if path.suffix == ".json":
                data = json.loads(content)
            else:
                data = yaml.safe_load(content)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigError(f"cannot parse config file {path}: {e}", cause=e) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"config file {path} must contain a mapping")
        return cls.from_dict(data)
