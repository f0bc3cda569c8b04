"""Dispatch layer: run a list of slide instructions against one builder.

``generate()`` resolves the presentation type, replays each instruction in
order through the method registry and saves the deck. The dispatch policy
decides what happens to a failing instruction: ``strict`` aborts the whole
request before anything is written, ``lenient`` skips it and records a
warning.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

from loguru import logger
from pydantic import ValidationError

from . import registry
from .builder import ConfigInput, PresentationBuilder
from .errors import (
    ConfigValidationError,
    DeckError,
    SlideError,
    SlideRenderError,
    UnknownBrand,
    UnknownPresentationType,
)
from .themes import THEMES, resolve_theme
from .writer import PptxWriter


class DispatchPolicy(str, Enum):
    STRICT = "strict"
    LENIENT = "lenient"

    @classmethod
    def parse(cls, value: Union[str, "DispatchPolicy", None]) -> "DispatchPolicy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or cls.STRICT.value).strip().lower())
        except ValueError:
            raise ValueError(f"dispatch policy must be 'strict' or 'lenient', got {value!r}") from None


@dataclass(frozen=True)
class Instruction:
    method: str
    params: list = field(default_factory=list)

    @classmethod
    def parse(cls, raw: Any) -> "Instruction":
        if isinstance(raw, Instruction):
            return raw
        if not isinstance(raw, Mapping):
            return cls(method="", params=[])
        params = raw.get("params")
        if params is None:
            params = []
        elif not isinstance(params, (list, tuple)):
            params = [params]
        return cls(method=str(raw.get("method") or ""), params=list(params))


@dataclass
class GenerationResult:
    filename: str
    slide_count: int
    size: int
    path: Path
    warnings: list[str] = field(default_factory=list)

    def as_dict(self, url_prefix: str = "") -> dict:
        return {
            "success": True,
            "filename": self.filename,
            "slideCount": self.slide_count,
            "size": self.size,
            "warnings": list(self.warnings),
            "downloadUrl": f"{url_prefix}/download/{self.filename}",
        }


def resolve_type(presentation_type: str) -> str:
    try:
        return resolve_theme(presentation_type).brand
    except UnknownBrand:
        raise UnknownPresentationType(str(presentation_type), list(THEMES)) from None


def list_available_slide_methods(presentation_type: str) -> list[str]:
    return registry.method_names(resolve_type(presentation_type))


def describe_templates() -> list[dict]:
    templates = []
    for brand, theme in THEMES.items():
        templates.append(
            {
                "name": theme.name,
                "type": brand,
                "description": theme.description,
                "methods": registry.method_names(brand),
            }
        )
    return templates


def _builder(brand: str, config: ConfigInput, writer: Optional[PptxWriter]) -> PresentationBuilder:
    try:
        return PresentationBuilder(brand, config, writer=writer)
    except ValidationError as exc:
        issues = []
        for err in exc.errors():
            where = ".".join(str(p) for p in err.get("loc", ()))
            issues.append(f"config.{where}: {err.get('msg')}" if where else f"config: {err.get('msg')}")
        raise ConfigValidationError(issues) from exc


def _reject(error: SlideError, policy: DispatchPolicy, warnings: list[str]) -> None:
    if policy is DispatchPolicy.STRICT:
        raise error
    logger.warning("Skipping instruction: {error}", error=error)
    warnings.append(str(error))


def generate(
    presentation_type: str,
    config: ConfigInput,
    instructions: Iterable[Any],
    *,
    output_dir: Union[str, Path],
    policy: Union[str, DispatchPolicy] = DispatchPolicy.STRICT,
    writer: Optional[PptxWriter] = None,
) -> GenerationResult:
    """Build a deck of *presentation_type* from *instructions* and save it to *output_dir*."""
    policy = DispatchPolicy.parse(policy)
    brand = resolve_type(presentation_type)
    builder = _builder(brand, config, writer)
    steps = [Instruction.parse(raw) for raw in instructions]
    logger.info("Generating {brand} deck from {n} instructions ({policy})", brand=brand, n=len(steps), policy=policy.value)

    warnings: list[str] = []
    for index, step in enumerate(steps):
        try:
            builder.invoke(step.method, step.params)
        except SlideError as exc:
            _reject(exc.locate(step.method, index), policy, warnings)
        except DeckError:
            raise
        except Exception as exc:
            _reject(SlideRenderError(step.method, exc, index=index), policy, warnings)

    filename = builder.save(output_dir)
    path = Path(output_dir) / filename
    return GenerationResult(
        filename=filename,
        slide_count=builder.slide_count,
        size=path.stat().st_size,
        path=path,
        warnings=warnings,
    )
