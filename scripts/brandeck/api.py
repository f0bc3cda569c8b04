"""Public API helpers for programmatic deck generation."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .dispatch import DispatchPolicy, GenerationResult, generate
from .recipes import expand_recipe
from .validation import validate_request, validate_request_file


def generate_from_request(
    request: Mapping[str, Any],
    *,
    output_dir: Path,
    policy: Union[str, DispatchPolicy] = DispatchPolicy.STRICT,
) -> GenerationResult:
    """Validate a ``{type, config, slides}`` request and generate the deck."""
    data = validate_request(dict(request) if isinstance(request, Mapping) else request)
    return generate(
        data["type"],
        data.get("config") or {},
        data["slides"],
        output_dir=output_dir,
        policy=policy,
    )


def generate_from_file(
    request_path: Path,
    *,
    output_dir: Path,
    policy: Union[str, DispatchPolicy] = DispatchPolicy.STRICT,
) -> GenerationResult:
    data = validate_request_file(request_path)
    return generate_from_request(data, output_dir=output_dir, policy=policy)


def generate_from_recipe(
    name: str,
    *,
    output_dir: Path,
    presentation_type: str = "corporate",
    values: Optional[Mapping[str, Any]] = None,
    config: Optional[Mapping[str, Any]] = None,
    policy: Union[str, DispatchPolicy] = DispatchPolicy.STRICT,
) -> GenerationResult:
    merged, slides = expand_recipe(name, values, config)
    return generate_from_request(
        {"type": presentation_type, "config": merged, "slides": slides},
        output_dir=output_dir,
        policy=policy,
    )


def write_request(request: Dict[str, Any], path: Path) -> Path:
    """Write a JSON request to disk and return the path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(request, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return path
