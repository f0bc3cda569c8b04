"""Branded slide-deck generation: themes, slide builders, dispatch and service."""

__version__ = "0.1.0"

from .api import generate_from_file, generate_from_recipe, generate_from_request, write_request
from .builder import Deck, PresentationBuilder
from .cli import run_cli
from .dispatch import (
    DispatchPolicy,
    GenerationResult,
    describe_templates,
    generate,
    list_available_slide_methods,
)
from .errors import (
    ConfigValidationError,
    DeckError,
    MalformedTable,
    SlideRenderError,
    UnknownPresentationType,
    UnknownSlideMethod,
)
from .model import PresentationConfig
from .themes import available_brands, resolve_theme
from .validation import validate_request, validate_request_file

__all__ = [
    "ConfigValidationError",
    "Deck",
    "DeckError",
    "DispatchPolicy",
    "GenerationResult",
    "MalformedTable",
    "PresentationBuilder",
    "PresentationConfig",
    "SlideRenderError",
    "UnknownPresentationType",
    "UnknownSlideMethod",
    "available_brands",
    "describe_templates",
    "generate",
    "generate_from_file",
    "generate_from_recipe",
    "generate_from_request",
    "list_available_slide_methods",
    "resolve_theme",
    "run_cli",
    "validate_request",
    "validate_request_file",
    "write_request",
]
