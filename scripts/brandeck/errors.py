"""Custom exceptions for deck generation, dispatch and housekeeping errors."""

from __future__ import annotations

from typing import Optional


class DeckError(Exception):
    """Base class for every error raised by brandeck."""


class ConfigValidationError(DeckError, ValueError):
    """Raised when a generation request (JSON) is structurally invalid."""

    def __init__(self, issues: list[str]):
        self.issues = [str(i).strip() for i in issues if str(i).strip()]
        if not self.issues:
            self.issues = ["Invalid request"]
        super().__init__(self._format())

    def _format(self) -> str:
        lines = ["Request validation failed:"]
        for issue in self.issues:
            lines.append(f"- {issue}")
        return "\n".join(lines)


class ConfigError(DeckError):
    """Invalid service settings (YAML file or environment)."""


class UnknownBrand(DeckError, KeyError):
    """The brand is not one of the registered themes."""

    def __init__(self, brand: str, known: Optional[list[str]] = None):
        self.brand = brand
        self.known = sorted(known or [])
        super().__init__(brand)

    def __str__(self) -> str:
        msg = f"Unknown presentation type: {self.brand}"
        if self.known:
            msg += f" (supported: {', '.join(self.known)})"
        return msg


class UnknownPresentationType(UnknownBrand):
    """A generation request named a presentation type that has no builder."""


class SlideError(DeckError):
    """A single instruction could not be turned into a slide.

    ``method`` and ``index`` identify the offending instruction once the
    dispatcher has located it.
    """

    def __init__(self, message: str, *, method: Optional[str] = None, index: Optional[int] = None):
        self.message = message
        self.method = method
        self.index = index
        super().__init__(message)

    def locate(self, method: str, index: int) -> "SlideError":
        self.method = method
        self.index = index
        return self

    def __str__(self) -> str:
        if self.method is None:
            return self.message
        where = f"slides[{self.index}]" if self.index is not None else "slide"
        return f"{where} ({self.method}): {self.message}"


class UnknownSlideMethod(SlideError):
    """The instruction names an operation the builder does not expose."""

    def __init__(self, method: str, brand: str, *, index: Optional[int] = None):
        self.brand = brand
        super().__init__(f"Unknown slide method for '{brand}'", method=method, index=index)


class InvalidSlideParams(SlideError):
    """The positional params do not fit the method's parameter shape."""


class MalformedTable(SlideError):
    """A table row has a different cell count than the header row."""

    def __init__(self, row_index: int, expected: int, actual: int):
        self.row_index = row_index
        self.expected = expected
        self.actual = actual
        super().__init__(f"Table row {row_index} has {actual} cells, expected {expected} (header length)")


class SlideRenderError(SlideError):
    """Any other failure raised while a slide builder was running."""

    def __init__(self, method: str, cause: BaseException, *, index: Optional[int] = None):
        self.cause = cause
        super().__init__(f"{type(cause).__name__}: {cause}", method=method, index=index)


class DeckFinalized(DeckError):
    """A slide operation was attempted after the deck was saved."""


class SerializationError(DeckError):
    """The document writer failed to persist the deck."""

    def __init__(self, destination: str, cause: BaseException):
        self.destination = destination
        self.cause = cause
        super().__init__(f"Failed to write {destination}: {cause}")


class InvalidFilename(DeckError, ValueError):
    """A requested filename is not a plain .pptx name inside the output directory."""


class DeckNotFound(DeckError):
    """The requested deck does not exist in the output directory."""


class UnknownRecipe(DeckError, KeyError):
    """No deck recipe is registered under the requested name."""

    def __init__(self, name: str, known: Optional[list[str]] = None):
        self.name = name
        self.known = sorted(known or [])
        super().__init__(name)

    def __str__(self) -> str:
        return f"Unknown recipe: {self.name} (available: {', '.join(self.known)})"


class ServiceError(DeckError):
    """A remote deck service answered with an error (or could not be reached)."""

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message if status_code is None else f"HTTP {status_code}: {message}")
