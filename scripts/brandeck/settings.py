"""Service configuration: YAML file, then BRANDECK_* environment overrides."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .dispatch import DispatchPolicy
from .errors import ConfigError

ENV_PREFIX = "BRANDECK_"
DEFAULT_CONFIG_PATH = Path("brandeck.yaml")


class Settings(BaseModel):
    """Service settings -- immutable after creation."""

    model_config = {"frozen": True, "extra": "forbid"}

    output_dir: Path = Field(default=Path("generated-presentations"), validate_default=True)
    dispatch_policy: DispatchPolicy = DispatchPolicy.STRICT
    max_age_days: float = Field(default=7, ge=0)
    host: str = "127.0.0.1"
    port: int = Field(default=3001, ge=1, le=65535)
    log_level: str = "INFO"
    log_dir: Optional[Path] = None
    base_url: str = "/api/presentations"
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    @field_validator("output_dir", mode="before")
    @classmethod
    def expand_output_dir(cls, v: Union[str, Path]) -> Path:
        return Path(v).expanduser().resolve()

    @field_validator("log_dir", mode="before")
    @classmethod
    def expand_log_dir(cls, v: Union[str, Path, None]) -> Optional[Path]:
        if v in (None, ""):
            return None
        return Path(v).expanduser().resolve()

    @field_validator("dispatch_policy", mode="before")
    @classmethod
    def parse_policy(cls, v: object) -> DispatchPolicy:
        return DispatchPolicy.parse(v)  # type: ignore[arg-type]

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_level(cls, v: object) -> str:
        level = str(v or "INFO").strip().upper()
        if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, v: object) -> object:
        # BRANDECK_CORS_ORIGINS="https://a.example,https://b.example"
        if isinstance(v, str):
            return [o.strip() for o in v.split(",") if o.strip()]
        return v

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return "/" + v.strip().strip("/") if v.strip("/ ") else ""


def _env_overrides(environ: Mapping[str, str]) -> dict:
    overrides = {}
    for name in Settings.model_fields:
        value = environ.get(ENV_PREFIX + name.upper())
        if value is not None and value != "":
            overrides[name] = value
    return overrides


def load_settings(
    path: Union[str, Path, None] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
    **overrides,
) -> Settings:
    """Load settings from *path* (YAML), the environment and explicit *overrides*.

    Precedence, lowest first: defaults, YAML file, ``BRANDECK_*`` variables,
    keyword overrides whose value is not None. A missing default config file
    is ignored; a missing explicit *path* is an error.
    """
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    data: dict = {}
    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        if path:
            raise ConfigError(f"Configuration file not found: {config_path}") from None
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {config_path} must contain a mapping")

    data.update(_env_overrides(os.environ if environ is None else environ))
    data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return Settings(**data)
    except (ValidationError, ValueError) as e:
        raise ConfigError(f"Configuration error: {e}") from e
