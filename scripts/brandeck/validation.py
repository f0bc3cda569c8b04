"""Structural validation for generation requests (JSON)."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from .errors import ConfigValidationError
from .themes import normalize_hex

_CONFIG_STRINGS = ("organisation", "organization", "tagline")


def _is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _check_config(config: Any, issues: list[str]) -> None:
    if config is None:
        return
    if not isinstance(config, dict):
        issues.append("config must be an object when provided")
        return

    for field in _CONFIG_STRINGS:
        value = config.get(field)
        if value is not None and not isinstance(value, str):
            issues.append(f"config.{field} must be a string when provided")

    color = config.get("primaryColor")
    if color is not None and normalize_hex(color) is None:
        issues.append(f"config.primaryColor must be a 6-digit hex colour, got {color!r}")

    spelling = config.get("spelling")
    if spelling is not None and str(spelling).strip().upper() not in {"UK", "US"}:
        issues.append("config.spelling must be 'UK' or 'US'")


def _check_slide(slide: Any, idx: int, issues: list[str]) -> None:
    prefix = f"slides[{idx}]"
    if not isinstance(slide, dict):
        issues.append(f"{prefix} must be an object with method + params")
        return
    if not _is_non_empty_str(slide.get("method")):
        issues.append(f"{prefix}.method is required and must be a non-empty string")
    params = slide.get("params")
    if params is not None and not isinstance(params, list):
        issues.append(f"{prefix}.params must be a list when provided")


def validate_request(request: Any) -> Dict[str, Any]:
    """Validate a generation request and return it.

    Only the request shape is checked here. Whether the type and methods
    exist is decided by the dispatcher, under the configured policy.
    """
    if not isinstance(request, dict):
        raise ConfigValidationError(["Root JSON value must be an object"])

    issues: list[str] = []
    if not _is_non_empty_str(request.get("type")):
        issues.append("type is required and must be a non-empty string")

    _check_config(request.get("config"), issues)

    slides = request.get("slides")
    if not isinstance(slides, list):
        issues.append("slides is required and must be a list")
    else:
        for idx, slide in enumerate(slides):
            _check_slide(slide, idx, issues)

    if issues:
        raise ConfigValidationError(issues)
    return request


def load_request_file(path: Path) -> Any:
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigValidationError([f"Request file not found: {path}"]) from exc

    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigValidationError([f"Invalid JSON at line {exc.lineno}, column {exc.colno}: {exc.msg}"]) from exc


def validate_request_file(path: Path) -> Dict[str, Any]:
    """Load and validate a JSON request file."""
    return validate_request(load_request_file(path))
