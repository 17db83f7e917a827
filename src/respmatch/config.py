"""Matcher settings and loading."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from respmatch.errors import ConfigValidationError, ErrorContext

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class MatchSettings(BaseSettings):
    """Settings for response matching."""

    model_config = SettingsConfigDict(
        env_prefix="RESPMATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Decode every JSON number as float, so 1 and 1.0 match.
    json_numbers_as_float: bool = True
    # Accept NaN / Infinity / -Infinity literals in JSON bodies.
    allow_json_constants: bool = False
    # Encoding for bodies supplied as str by duck-typed responses.
    body_encoding: str = "utf-8"
    mismatch_log_level: str = "DEBUG"

    @field_validator("mismatch_log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = str(v).upper()
        if level not in LOG_LEVELS:
            raise ConfigValidationError(
                message=f"Invalid log level: {v!r}. Valid: {list(LOG_LEVELS)}",
                field="mismatch_log_level",
                value=v,
                context=ErrorContext(extra={"valid_levels": list(LOG_LEVELS)}),
            )
        return level

    @field_validator("body_encoding")
    @classmethod
    def validate_body_encoding(cls, v: str) -> str:
        try:
            "".encode(v)
        except LookupError as e:
            raise ConfigValidationError(
                message=f"Unknown body encoding: {v!r}",
                field="body_encoding",
                value=v,
                cause=e,
            ) from e
        return v

    @property
    def log_level(self) -> int:
        """Numeric logging level for mismatch messages."""
        return logging.getLevelName(self.mismatch_log_level)


def load_config(config_path: str | Path | None = None) -> MatchSettings:
    """Load settings from file and environment.

    Priority: env vars > config file > defaults
    """
    config_data: dict[str, Any] = {}

    if config_path is not None:
        config_path = Path(config_path)
        if config_path.exists():
            with open(config_path) as f:
                config_data = yaml.safe_load(f) or {}

    config_data.update(_get_env_overrides())

    return MatchSettings(**config_data)


def _get_env_overrides() -> dict[str, Any]:
    """Get settings overrides from environment variables."""
    overrides: dict[str, Any] = {}

    env_mappings = {
        "RESPMATCH_JSON_NUMBERS_AS_FLOAT": ("json_numbers_as_float", _parse_bool),
        "RESPMATCH_ALLOW_JSON_CONSTANTS": ("allow_json_constants", _parse_bool),
        "RESPMATCH_BODY_ENCODING": "body_encoding",
        "RESPMATCH_MISMATCH_LOG_LEVEL": "mismatch_log_level",
    }

    for env_key, config_key in env_mappings.items():
        value = os.environ.get(env_key)
        if value is not None:
            if isinstance(config_key, tuple):
                key, converter = config_key
                overrides[key] = converter(value)
            else:
                overrides[config_key] = value

    return overrides


def _parse_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")
