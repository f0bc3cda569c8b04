"""Presentation builder: one deck per (brand, config).

The builder owns an append-only :class:`Deck` and exposes every registered
slide method as an operation on it. A slide is appended only after its
builder returned, so a failing operation never leaves a partial slide
behind. ``save()`` is terminal.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator, Mapping, Optional, Sequence, Union

from loguru import logger

from . import registry
from .errors import DeckFinalized
from .model import PresentationConfig, RenderedSlide
from .storage import make_filename
from .themes import Theme, resolve_theme
from .writer import PptxWriter


class Deck:
    """Ordered, append-only slide sequence."""

    def __init__(self, theme: Theme):
        self.theme = theme
        self._slides: list[RenderedSlide] = []

    def append(self, slide: RenderedSlide) -> None:
        self._slides.append(slide)

    def __len__(self) -> int:
        return len(self._slides)

    def __iter__(self) -> Iterator[RenderedSlide]:
        return iter(self._slides)

    def __getitem__(self, index: int) -> RenderedSlide:
        return self._slides[index]

    @property
    def kinds(self) -> list[str]:
        return [s.kind for s in self._slides]


ConfigInput = Union[PresentationConfig, Mapping[str, Any], None]


class PresentationBuilder:
    def __init__(self, brand: str, config: ConfigInput = None, *, writer: Optional[PptxWriter] = None):
        base = resolve_theme(brand)
        if not isinstance(config, PresentationConfig):
            config = PresentationConfig.model_validate(dict(config or {}))
        self.config = config.merged(base)
        self.theme = base.with_primary(self.config.primary_color)
        self.brand = base.brand
        self.deck = Deck(self.theme)
        self.writer = writer or PptxWriter()
        self.saved_as: Optional[str] = None

    @property
    def slide_count(self) -> int:
        return len(self.deck)

    @property
    def finalized(self) -> bool:
        return self.saved_as is not None

    def available_methods(self) -> list[str]:
        return registry.method_names(self.brand)

    def invoke(self, method: str, params: Optional[Sequence[Any]] = None) -> RenderedSlide:
        """Run the registered slide method *method* with positional *params*."""
        if self.finalized:
            raise DeckFinalized(f"Deck already saved as {self.saved_as}; cannot add '{method}'")
        entry = registry.lookup(self.brand, method)
        args = entry.bind(params)
        slide = entry.build(self.theme, self.config, *args)
        self.deck.append(slide)
        return slide

    # Python-side operations; each routes through the registry entry of the
    # same method so argument parsing is identical to JSON requests.

    def create_title_slide(self, line_one: str, line_two: str = "", subtitle: str = "") -> RenderedSlide:
        return self.invoke("createTitleSlide", [line_one, line_two, subtitle])

    def create_content_slide(self, title: str, bullets: Sequence[str] = ()) -> RenderedSlide:
        return self.invoke("createContentSlide", [title, list(bullets)])

    def create_executive_summary(self, title: str, metrics: Sequence[Any]) -> RenderedSlide:
        return self.invoke("createExecutiveSummary", [title, list(metrics)])

    def create_table_slide(
        self,
        title: str,
        headers: Sequence[Any],
        rows: Sequence[Sequence[Any]],
        options: Optional[Mapping[str, Any]] = None,
    ) -> RenderedSlide:
        return self.invoke("createTableSlide", [title, list(headers), list(rows), options])

    def create_framework_slide(self, title: str, boxes: Sequence[Any]) -> RenderedSlide:
        return self.invoke("createFrameworkSlide", [title, list(boxes)])

    def create_timeline(self, title: str, phases: Sequence[Any]) -> RenderedSlide:
        return self.invoke("createTimeline", [title, list(phases)])

    def create_key_messages(self, title: str, messages: Sequence[str]) -> RenderedSlide:
        return self.invoke("createKeyMessages", [title, list(messages)])

    def create_next_steps(self, title: str, steps: Sequence[Any]) -> RenderedSlide:
        return self.invoke("createNextSteps", [title, list(steps)])

    def create_section_slide(self, heading: str) -> RenderedSlide:
        return self.invoke("createSectionSlide", [heading])

    def create_numbered_framework(self, title: str, items: Sequence[Any], closing_stat: str = "") -> RenderedSlide:
        return self.invoke("createNumberedFramework", [title, list(items), closing_stat])

    def create_case_study(self, title: str, case: Mapping[str, Any]) -> RenderedSlide:
        return self.invoke("createCaseStudy", [title, dict(case)])

    def save(self, output_dir: Union[str, Path]) -> str:
        """Serialize the deck into *output_dir* and return the new filename."""
        if self.finalized:
            raise DeckFinalized(f"Deck already saved as {self.saved_as}")
        filename = make_filename(self.brand, self.config.organisation or "")
        destination = Path(output_dir) / filename
        self.writer.serialize(self.deck, destination)
        self.saved_as = filename
        logger.info("Saved {brand} deck with {count} slides to {path}", brand=self.brand, count=len(self.deck), path=destination)
        return filename
