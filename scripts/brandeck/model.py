"""Slide content models and the abstract rendered-slide model.

Content models parse the JSON values callers pass as instruction params.
Rendered slides are what the builders produce and the document writer
serializes: positioned text, shapes and tables with resolved colours.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field, field_validator, model_validator

from .geometry import Box
from .themes import Theme, normalize_hex


def as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return "\n".join(as_text(item) for item in value)
    return str(value)


# JSON callers send numbers where text is expected ("value": 25).
Text = Annotated[str, BeforeValidator(as_text)]


class _Content(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)


_US_SPELLING = {
    "organisation": "organization",
    "Organisation": "Organization",
    "optimisation": "optimization",
    "Optimisation": "Optimization",
    "programme": "program",
    "colour": "color",
}


class PresentationConfig(BaseModel):
    """Caller overrides merged over the theme defaults; immutable once built."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    organisation: Optional[Text] = Field(default=None, validation_alias=AliasChoices("organisation", "organization"))
    tagline: Optional[Text] = None
    primary_color: Optional[str] = Field(default=None, validation_alias="primaryColor")
    spelling: Literal["UK", "US"] = "UK"

    @field_validator("spelling", mode="before")
    @classmethod
    def upper_spelling(cls, v: Any) -> Any:
        return str(v or "UK").strip().upper()

    @field_validator("primary_color")
    @classmethod
    def check_primary_color(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        parsed = normalize_hex(v)
        if parsed is None:
            raise ValueError(f"primaryColor must be a 6-digit hex colour, got {v!r}")
        return parsed

    def merged(self, theme: Theme) -> "PresentationConfig":
        """Fill unset fields from *theme* defaults, in the configured spelling."""
        return self.model_copy(
            update={
                "organisation": self.organisation or self.localize(theme.default_organisation),
                "tagline": self.localize(theme.default_tagline) if self.tagline is None else self.tagline,
            }
        )

    def localize(self, text: str) -> str:
        """Apply the configured spelling variant to built-in labels."""
        if self.spelling != "US":
            return text
        for uk, us in _US_SPELLING.items():
            text = text.replace(uk, us)
        return text


def _body_alias(data: Any) -> Any:
    if isinstance(data, dict) and "content" not in data and "body" in data:
        return {**data, "content": data["body"]}
    return data


class Metric(_Content):
    value: Text
    label: Text = ""
    sublabel: Optional[Text] = None
    highlight: bool = False


class TableCell(_Content):
    value: Any = ""
    color: Optional[str] = None
    bold: bool = False

    @property
    def text(self) -> str:
        return as_text(self.value)

    @classmethod
    def parse(cls, raw: Any) -> "TableCell":
        if isinstance(raw, dict):
            return cls.model_validate(raw)
        return cls(value=raw)


class FrameworkBox(_Content):
    title: Text
    content: Text = ""
    color: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def accept_body_alias(cls, data: Any) -> Any:
        return _body_alias(data)


class NumberedItem(_Content):
    header: Text
    content: Text = ""

    @model_validator(mode="before")
    @classmethod
    def accept_plain_header(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"header": data}
        return _body_alias(data)


class TimelinePhase(_Content):
    period: Text = ""
    title: Text
    details: Optional[Text] = None
    color: Optional[str] = None


class CaseValue(_Content):
    date: Text = ""
    value: Text = ""


class CaseStudy(_Content):
    company: Text
    entry: CaseValue = CaseValue()
    exit: CaseValue = CaseValue()
    return_multiple: Text = Field(default="", validation_alias="return")
    achievements: List[Text] = Field(default_factory=list)


class NextStep(_Content):
    phase: Text
    action: Text = ""
    owner: Text = ""
    timing: Text = ""

    @property
    def meta(self) -> str:
        return " | ".join(part for part in (self.owner, self.timing) if part)


class TableOptions(_Content):
    zebra_stripe: bool = Field(default=True, validation_alias="zebraStripe")
    font_size: Optional[float] = Field(default=None, validation_alias="fontSize", gt=0)
    row_height: Optional[float] = Field(default=None, validation_alias="rowHeight", gt=0)
    header_color: Optional[str] = Field(default=None, validation_alias="headerColor")


# --- rendered model -------------------------------------------------------


@dataclass
class TextElement:
    box: Box
    text: str
    size: float
    color: str
    font: str
    bold: bool = False
    align: str = "left"
    valign: str = "top"
    char_spacing: float = 0.0


@dataclass
class ShapeElement:
    kind: str  # rect | ellipse | line
    box: Box
    fill: Optional[str] = None
    line: Optional[str] = None
    line_width: float = 0.0
    transparency: float = 0.0


@dataclass
class RenderedCell:
    text: str
    color: str
    fill: str
    bold: bool = False
    font: str = ""


@dataclass
class TableElement:
    box: Box
    column_widths: list[float]
    row_height: float
    rows: list[list[RenderedCell]]
    size: float
    align: str = "center"


Element = Union[TextElement, ShapeElement, TableElement]


@dataclass
class RenderedSlide:
    kind: str
    background: Optional[str] = None
    elements: list[Element] = field(default_factory=list)

    def add(self, element: Element) -> Element:
        self.elements.append(element)
        return element

    def texts(self) -> list[str]:
        return [e.text for e in self.elements if isinstance(e, TextElement)]

    def shapes(self, kind: Optional[str] = None) -> list[ShapeElement]:
        return [e for e in self.elements if isinstance(e, ShapeElement) and (kind is None or e.kind == kind)]

    def tables(self) -> list[TableElement]:
        return [e for e in self.elements if isinstance(e, TableElement)]
