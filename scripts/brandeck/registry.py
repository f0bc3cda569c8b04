"""Registry of slide methods exposed to generation requests.

Each entry maps a public method name (``createTitleSlide``) to its slide
builder, the positional parameter shape it accepts and the brands that
offer it. Lookup and argument binding happen before any rendering, so an
unknown name or a wrong arity never reaches a builder.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Sequence

from pydantic import ValidationError

from . import slides
from .errors import InvalidSlideParams, UnknownSlideMethod
from .model import (
    CaseStudy,
    FrameworkBox,
    Metric,
    NextStep,
    NumberedItem,
    TableOptions,
    TimelinePhase,
    as_text,
)
from .themes import THEMES, resolve_theme

ALL_BRANDS = frozenset(THEMES)


def _text(value: Any) -> str:
    if isinstance(value, (dict, list)):
        raise ValueError(f"expected text, got {type(value).__name__}")
    return as_text(value)


def _text_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"expected a list of strings, got {type(value).__name__}")
    return [as_text(item) for item in value]


def _list_of(parse: Callable[[Any], Any]) -> Callable[[Any], list]:
    def parse_list(value: Any) -> list:
        if not isinstance(value, (list, tuple)):
            raise ValueError(f"expected a list, got {type(value).__name__}")
        return [parse(item) for item in value]

    return parse_list


def _rows(value: Any) -> list:
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"expected a list of rows, got {type(value).__name__}")
    return list(value)


def _table_options(value: Any) -> TableOptions:
    if value is None:
        return TableOptions()
    return TableOptions.model_validate(value)


@dataclass(frozen=True)
class Param:
    name: str
    parse: Callable[[Any], Any]
    required: bool = True
    default: Any = None


@dataclass(frozen=True)
class SlideMethod:
    name: str
    kind: str
    build: Callable[..., Any]
    params: tuple[Param, ...]
    description: str
    brands: frozenset = ALL_BRANDS
    aliases: tuple[str, ...] = ()
    adapt: Optional[Callable[[list], list]] = field(default=None, compare=False)

    @property
    def min_params(self) -> int:
        return sum(1 for p in self.params if p.required)

    @property
    def signature(self) -> str:
        parts = [p.name if p.required else f"{p.name}?" for p in self.params]
        return f"{self.name}({', '.join(parts)})"

    def bind(self, params: Optional[Sequence[Any]]) -> list[Any]:
        """Check arity and parse *params* into builder arguments."""
        values = list(params or [])
        if self.adapt is not None:
            values = self.adapt(values)
        if not self.min_params <= len(values) <= len(self.params):
            expected = (
                str(self.min_params)
                if self.min_params == len(self.params)
                else f"{self.min_params}-{len(self.params)}"
            )
            raise InvalidSlideParams(f"expects {expected} params {self.signature}, got {len(values)}")

        values += [param.default for param in self.params[len(values):]]
        bound: list[Any] = []
        for param, value in zip(self.params, values):
            if value is None and not param.required:
                value = param.default
            try:
                bound.append(param.parse(value))
            except ValidationError as exc:
                first = exc.errors()[0]
                where = ".".join(str(p) for p in first.get("loc", ()))
                detail = f"{where}: {first.get('msg')}" if where else first.get("msg")
                raise InvalidSlideParams(f"param '{param.name}' is invalid ({detail})") from exc
            except (TypeError, ValueError) as exc:
                raise InvalidSlideParams(f"param '{param.name}' is invalid ({exc})") from exc
        return bound


def _key_messages_adapt(values: list) -> list:
    # Older clients send only the message list; the builder supplies the title.
    if len(values) == 1 and isinstance(values[0], (list, tuple)):
        return [None, values[0]]
    return values


_METHODS: tuple[SlideMethod, ...] = (
    SlideMethod(
        name="createTitleSlide",
        kind="title",
        build=slides.build_title_slide,
        params=(Param("lineOne", _text), Param("lineTwo", _text, False, ""), Param("subtitle", _text, False, "")),
        description="Cover slide with a two-line headline and optional subtitle",
    ),
    SlideMethod(
        name="createContentSlide",
        kind="content",
        build=slides.build_content_slide,
        params=(Param("title", _text), Param("bullets", _text_list, False, ())),
        description="Titled content slide with optional bullet lines",
    ),
    SlideMethod(
        name="createExecutiveSummary",
        kind="executive-summary",
        build=slides.build_executive_summary,
        params=(Param("title", _text), Param("metrics", _list_of(Metric.model_validate))),
        description="Up to three metric cards (extra metrics are dropped)",
    ),
    SlideMethod(
        name="createTableSlide",
        kind="table",
        build=slides.build_table_slide,
        params=(
            Param("title", _text),
            Param("headers", _list_of(lambda h: h)),
            Param("rows", _rows),
            Param("options", _table_options, False),
        ),
        description="Data table with zebra striping and per-cell colour/bold overrides",
        aliases=("createDataTable",),
    ),
    SlideMethod(
        name="createFrameworkSlide",
        kind="framework",
        build=slides.build_framework_slide,
        params=(Param("title", _text), Param("boxes", _list_of(FrameworkBox.model_validate))),
        description="Three-box framework (extra boxes are dropped)",
    ),
    SlideMethod(
        name="createTimeline",
        kind="timeline",
        build=slides.build_timeline,
        params=(Param("title", _text), Param("phases", _list_of(TimelinePhase.model_validate))),
        description="Horizontal timeline of up to six phases",
    ),
    SlideMethod(
        name="createKeyMessages",
        kind="key-messages",
        build=slides.build_key_messages,
        params=(Param("title", _text), Param("messages", _text_list)),
        description="Numbered key messages (up to five)",
        adapt=_key_messages_adapt,
    ),
    SlideMethod(
        name="createNextSteps",
        kind="next-steps",
        build=slides.build_next_steps,
        params=(Param("title", _text), Param("steps", _list_of(NextStep.model_validate))),
        description="Next steps with phase, action, owner and timing (up to five)",
    ),
    SlideMethod(
        name="createSectionSlide",
        kind="section",
        build=slides.build_section_slide,
        params=(Param("heading", _text),),
        description="Section divider with the tagline at the top",
        brands=frozenset({"investment"}),
        aliases=("createSectionDivider",),
    ),
    SlideMethod(
        name="createNumberedFramework",
        kind="numbered-framework",
        build=slides.build_numbered_framework,
        params=(
            Param("title", _text),
            Param("items", _list_of(NumberedItem.model_validate)),
            Param("closingStat", _text, False, ""),
        ),
        description="Numbered items (up to five) with an optional closing statistic",
        brands=frozenset({"investment"}),
    ),
    SlideMethod(
        name="createCaseStudy",
        kind="case-study",
        build=slides.build_case_study,
        params=(Param("title", _text), Param("caseData", CaseStudy.model_validate)),
        description="Investment case study: entry, exit, return multiple and achievements",
        brands=frozenset({"investment"}),
    ),
)


def _index(methods: Sequence[SlideMethod]) -> Mapping[str, SlideMethod]:
    index: dict[str, SlideMethod] = {}
    for method in methods:
        for name in (method.name, *method.aliases):
            if name in index:
                raise RuntimeError(f"Duplicate slide method name: {name}")
            index[name] = method
    return index


_BY_NAME = _index(_METHODS)


def lookup(brand: str, method: str) -> SlideMethod:
    """Return the registry entry for *method* on *brand* or raise :class:`UnknownSlideMethod`."""
    entry = _BY_NAME.get(str(method or ""))
    if entry is None or brand not in entry.brands:
        raise UnknownSlideMethod(str(method or ""), brand)
    return entry


def methods_for(brand: str) -> list[SlideMethod]:
    theme = resolve_theme(brand)
    return [m for m in _METHODS if theme.brand in m.brands]


def method_names(brand: str) -> list[str]:
    return [m.name for m in methods_for(brand)]
