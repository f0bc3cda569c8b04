"""Slide builders: one pure function per slide kind.

Each builder takes the theme, the merged presentation config and the parsed
content, and returns a fully built :class:`RenderedSlide`. Builders never
touch the deck or the filesystem; colours and type always come from the
theme's roles, so the same content renders in either brand.

Cardinality caps are fixed: metric cards and framework boxes keep the first
3 items, timelines the first 6 phases, and the stacked layouts (numbered
items, key messages, next steps) the first 5 rows. Extra items are dropped
silently, in input order.
"""

from __future__ import annotations

from typing import Optional, Sequence

from .errors import InvalidSlideParams, MalformedTable
from .geometry import Box, column_widths, distribute_horizontal, stack_vertical
from .model import (
    CaseStudy,
    FrameworkBox,
    Metric,
    NextStep,
    NumberedItem,
    PresentationConfig,
    RenderedCell,
    RenderedSlide,
    ShapeElement,
    TableCell,
    TableElement,
    TableOptions,
    TextElement,
    TimelinePhase,
)
from .themes import Theme

MAX_METRIC_CARDS = 3
MAX_FRAMEWORK_BOXES = 3
MAX_TIMELINE_PHASES = 6
MAX_STACKED_ROWS = 5
DEFAULT_KEY_MESSAGES_TITLE = "Key Messages"

CARD_GAP = 0.3
ROW_GAP = 0.15


def _text(
    theme: Theme,
    box: Box,
    text: str,
    role: str,
    *,
    color: Optional[str] = None,
    size: Optional[float] = None,
    bold: Optional[bool] = None,
    align: str = "left",
    valign: str = "top",
) -> TextElement:
    style = theme.style(role)
    return TextElement(
        box=box,
        text=text,
        size=size if size is not None else style.size,
        color=theme.color(color, default=style.color),
        font=style.font,
        bold=style.bold if bold is None else bold,
        align=align,
        valign=valign,
        char_spacing=style.char_spacing,
    )


def _rect(theme: Theme, box: Box, fill: Optional[str], *, line: Optional[str] = None, line_width: float = 0.0) -> ShapeElement:
    return ShapeElement(
        kind="rect",
        box=box,
        fill=theme.color(fill) if fill else None,
        line=theme.color(line) if line else None,
        line_width=line_width,
    )


def _footer_text(config: PresentationConfig) -> str:
    return (config.tagline or "").strip() or (config.organisation or "").upper()


def add_tagline(
    theme: Theme,
    config: PresentationConfig,
    slide: RenderedSlide,
    anchor: Optional[str] = None,
    *,
    color: Optional[str] = None,
) -> None:
    """Place the brand tagline (or the organisation mark) at *anchor* (``top`` | ``bottom``)."""
    text = _footer_text(config)
    if not text:
        return
    page = theme.page
    anchor = anchor or theme.tagline_anchor
    if anchor == "top":
        box = Box(page.margin_x, 0.2, page.content_width, page.footer_h)
        slide.add(_text(theme, box, text, "tagline", color=color or "primary", align="right"))
    else:
        box = Box(page.margin_x, page.footer_y, page.content_width, page.footer_h)
        slide.add(_text(theme, box, text, "tagline", color=color, align="left"))


def _content_slide(theme: Theme, kind: str, title: str) -> RenderedSlide:
    page = theme.page
    slide = RenderedSlide(kind=kind, background=theme.color("background"))
    slide.add(_text(theme, Box(page.margin_x, page.title_y, page.content_width, page.title_h), title, "slideTitle"))
    if page.header_rule_y is not None:
        slide.add(
            ShapeElement(
                kind="line",
                box=Box(page.margin_x, page.header_rule_y, page.content_width, 0),
                line=theme.color("rule"),
                line_width=0.5,
            )
        )
    return slide


def _slot_width(theme: Theme, slots: int) -> float:
    return (theme.page.content_width - (slots - 1) * CARD_GAP) / slots


def _stacked_rows(theme: Theme, n: int, *, top: float, bottom: float, preferred: float) -> list[Box]:
    page = theme.page
    region = Box(page.margin_x, top, page.content_width, bottom - top)
    if n > 0:
        fitted = (region.h - (n - 1) * ROW_GAP) / n
        preferred = min(preferred, fitted)
    return stack_vertical(n, region, gap=ROW_GAP, item_height=preferred)


# --- builders ---------------------------------------------------------------


def build_title_slide(
    theme: Theme,
    config: PresentationConfig,
    line_one: str,
    line_two: str = "",
    subtitle: str = "",
) -> RenderedSlide:
    page = theme.page
    slide = RenderedSlide(kind="title", background=theme.color("background"))

    x = page.margin_x
    if theme.edge_accent:
        slide.add(_rect(theme, Box(0, 0, 0.15, page.height), "primary"))
        slide.add(_rect(theme, Box(0.25, 0, 0.02, page.height), "accent"))
        x = 1.2
    width = page.width - x - page.margin_x
    y = round(page.height / 3, 2)

    slide.add(_text(theme, Box(x, y, width, 0.6), line_one, "title"))
    if line_two:
        slide.add(_text(theme, Box(x, y + 0.65, width, 0.6), line_two, "title"))
    if theme.edge_accent:
        slide.add(ShapeElement(kind="line", box=Box(x, y + 1.4, 3, 0), line=theme.color("accent"), line_width=1.5))
    if subtitle:
        slide.add(_text(theme, Box(x, y + 1.6, width, 0.4), subtitle, "subheading"))

    organisation = (config.organisation or "").upper()
    if organisation:
        slide.add(_text(theme, Box(x, y + 2.45, min(width, 4.0), 0.3), organisation, "tagline"))
    if config.tagline:
        add_tagline(theme, config, slide)
    return slide


def build_content_slide(
    theme: Theme,
    config: PresentationConfig,
    title: str,
    bullets: Sequence[str] = (),
) -> RenderedSlide:
    page = theme.page
    slide = _content_slide(theme, "content", title)
    lines = [b if b.lstrip().startswith("•") else f"• {b}" for b in bullets if b.strip()]
    if lines:
        body = Box(page.margin_x, page.content_top, page.content_width, page.footer_y - page.content_top - 0.2)
        slide.add(_text(theme, body, "\n".join(lines), "body"))
    add_tagline(theme, config, slide)
    return slide


def build_executive_summary(
    theme: Theme,
    config: PresentationConfig,
    title: str,
    metrics: Sequence[Metric],
) -> RenderedSlide:
    page = theme.page
    slide = _content_slide(theme, "executive-summary", title)

    cards = list(metrics)[:MAX_METRIC_CARDS]
    card_h = round(page.height * 0.27, 2)
    region = Box(page.margin_x, page.content_top + 0.2, page.content_width, card_h)
    boxes = distribute_horizontal(len(cards), region, gap=CARD_GAP, item_width=_slot_width(theme, MAX_METRIC_CARDS))

    for metric, box in zip(cards, boxes):
        slide.add(_rect(theme, box, "surface"))
        slide.add(_rect(theme, Box(box.x, box.y, box.w, 0.04), "highlight" if metric.highlight else "accent"))
        slide.add(
            _text(
                theme,
                Box(box.x, box.y + 0.3, box.w, 0.6),
                metric.value,
                "dataLarge",
                color="highlight" if metric.highlight else None,
                align="center",
            )
        )
        if metric.label:
            slide.add(_text(theme, Box(box.x, box.y + 0.95, box.w, 0.3), metric.label, "dataSmall", align="center"))
        if metric.sublabel:
            slide.add(_text(theme, Box(box.x, box.y + 1.25, box.w, 0.25), metric.sublabel, "caption", align="center"))

    add_tagline(theme, config, slide)
    return slide


def build_table_slide(
    theme: Theme,
    config: PresentationConfig,
    title: str,
    headers: Sequence[object],
    rows: Sequence[Sequence[object]],
    options: Optional[TableOptions] = None,
) -> RenderedSlide:
    """Render a styled data table.

    Every row must have exactly as many cells as the header, otherwise
    :class:`MalformedTable` is raised before anything is built. Object cells
    (``{"value", "color", "bold"}``) override the text colour and weight;
    ``color`` may be a palette role such as ``dataPositive`` or a hex value.
    """
    options = options or TableOptions()
    if not headers:
        raise InvalidSlideParams("Table header row must contain at least one column")
    for row_index, row in enumerate(rows):
        if not isinstance(row, (list, tuple)):
            raise InvalidSlideParams(f"Table row {row_index} must be a list of cells")
        if len(row) != len(headers):
            raise MalformedTable(row_index, len(headers), len(row))

    page = theme.page
    style = theme.style("table")
    size = options.font_size or style.size
    row_h = options.row_height or round(page.height * 0.055, 2)
    header_fill = theme.color(options.header_color, default="primary")

    rendered: list[list[RenderedCell]] = [
        [RenderedCell(text=TableCell.parse(h).text, color=theme.color("inverse"), fill=header_fill, bold=True, font=style.font) for h in headers]
    ]
    for row_index, row in enumerate(rows):
        striped = options.zebra_stripe and row_index % 2 == 0
        fill = theme.color("surface" if striped else "background")
        cells = []
        for raw in row:
            cell = TableCell.parse(raw)
            cells.append(
                RenderedCell(
                    text=cell.text,
                    color=theme.color(cell.color, default=style.color),
                    fill=fill,
                    bold=cell.bold,
                    font=style.font,
                )
            )
        rendered.append(cells)

    slide = _content_slide(theme, "table", title)
    box = Box(page.margin_x, page.content_top, page.content_width, row_h * len(rendered))
    slide.add(
        TableElement(
            box=box,
            column_widths=column_widths(len(headers), box.w),
            row_height=row_h,
            rows=rendered,
            size=size,
        )
    )
    add_tagline(theme, config, slide)
    return slide


def build_framework_slide(
    theme: Theme,
    config: PresentationConfig,
    title: str,
    boxes: Sequence[FrameworkBox],
) -> RenderedSlide:
    page = theme.page
    slide = _content_slide(theme, "framework", title)

    items = list(boxes)[:MAX_FRAMEWORK_BOXES]
    region = Box(page.margin_x, page.content_top + 0.1, page.content_width, round(page.height * 0.55, 2))
    for item, box in zip(items, distribute_horizontal(len(items), region, gap=CARD_GAP, item_width=_slot_width(theme, MAX_FRAMEWORK_BOXES))):
        slide.add(_rect(theme, box, "surface", line="rule", line_width=1))
        slide.add(_rect(theme, Box(box.x, box.y, box.w, 0.08), item.color or "primary"))
        inner_x, inner_w = box.x + 0.2, box.w - 0.4
        slide.add(_text(theme, Box(inner_x, box.y + 0.25, inner_w, 0.45), item.title, "heading", color=item.color))
        slide.add(_text(theme, Box(inner_x, box.y + 0.8, inner_w, box.h - 1.0), item.content, "body"))

    add_tagline(theme, config, slide)
    return slide


def build_numbered_framework(
    theme: Theme,
    config: PresentationConfig,
    title: str,
    items: Sequence[NumberedItem],
    closing_stat: str = "",
) -> RenderedSlide:
    page = theme.page
    slide = _content_slide(theme, "numbered-framework", title)

    bottom = page.footer_y - (0.8 if closing_stat else 0.2)
    rows = list(items)[:MAX_STACKED_ROWS]
    for number, (item, box) in enumerate(zip(rows, _stacked_rows(theme, len(rows), top=page.content_top, bottom=bottom, preferred=1.0)), start=1):
        badge = Box(box.x, box.y, 0.5, 0.5)
        slide.add(ShapeElement(kind="ellipse", box=badge, fill=theme.color("primary")))
        slide.add(_text(theme, badge, f"{number:02d}", "heading", color="inverse", size=16, align="center", valign="middle"))
        slide.add(_text(theme, Box(box.x + 0.7, box.y, box.w - 0.7, 0.35), item.header, "heading"))
        if item.content:
            slide.add(_text(theme, Box(box.x + 0.7, box.y + 0.35, box.w - 0.7, max(0.3, box.h - 0.35)), item.content, "body"))

    if closing_stat:
        stat_box = Box(page.margin_x, page.footer_y - 0.7, page.content_width, 0.5)
        slide.add(_text(theme, stat_box, closing_stat, "heading", color="primary", size=16, align="center"))

    add_tagline(theme, config, slide)
    return slide


def build_timeline(
    theme: Theme,
    config: PresentationConfig,
    title: str,
    phases: Sequence[TimelinePhase],
) -> RenderedSlide:
    page = theme.page
    slide = _content_slide(theme, "timeline", title)

    items = list(phases)[:MAX_TIMELINE_PHASES]
    axis_y = page.content_top + 0.2
    region = Box(page.margin_x, axis_y + 0.4, page.content_width, round(page.height * 0.4, 2))
    boxes = distribute_horizontal(len(items), region, gap=CARD_GAP)

    if len(boxes) > 1:
        first, last = boxes[0], boxes[-1]
        start = first.x + first.w / 2
        slide.add(
            ShapeElement(
                kind="line",
                box=Box(start, axis_y, (last.x + last.w / 2) - start, 0),
                line=theme.color("rule"),
                line_width=1,
            )
        )

    for phase, box in zip(items, boxes):
        color = theme.color(phase.color, default="primary")
        slide.add(ShapeElement(kind="ellipse", box=Box(box.x + box.w / 2 - 0.1, axis_y - 0.1, 0.2, 0.2), fill=color))
        slide.add(ShapeElement(kind="rect", box=box, fill=theme.color("surface"), line=color, line_width=2))
        slide.add(_text(theme, Box(box.x, box.y + 0.15, box.w, 0.3), phase.period, "caption", color=phase.color or "primary", bold=True, align="center"))
        slide.add(_text(theme, Box(box.x + 0.1, box.y + 0.5, box.w - 0.2, 0.45), phase.title, "heading", size=min(theme.style("heading").size, 14), align="center"))
        if phase.details:
            slide.add(_text(theme, Box(box.x + 0.1, box.y + 1.0, box.w - 0.2, max(0.3, box.h - 1.1)), phase.details, "caption", align="center"))

    add_tagline(theme, config, slide)
    return slide


def build_case_study(
    theme: Theme,
    config: PresentationConfig,
    title: str,
    case: CaseStudy,
) -> RenderedSlide:
    page = theme.page
    slide = _content_slide(theme, "case-study", title)
    x, width = page.margin_x, page.content_width
    top = page.content_top - 0.3

    slide.add(_text(theme, Box(x, top, width, 0.5), case.company, "sectionTitle", color="primary", size=28, bold=True))
    bar_y = top + 0.8
    slide.add(_rect(theme, Box(x, bar_y, width, 0.05), "primary"))

    side_w = 4.0
    exit_x = page.width - page.margin_x - side_w
    for label, side, sx, align, value_color in (
        (config.localize("Entry"), case.entry, x, "left", None),
        (config.localize("Exit"), case.exit, exit_x, "right", "dataPositive"),
    ):
        slide.add(_text(theme, Box(sx, bar_y + 0.2, side_w, 0.3), label, "caption", align=align))
        slide.add(_text(theme, Box(sx, bar_y + 0.5, side_w, 0.3), side.date, "body", bold=True, align=align))
        slide.add(_text(theme, Box(sx, bar_y + 0.85, side_w, 0.35), side.value, "dataSmall", color=value_color, size=20, align=align))

    if case.return_multiple:
        mid_w = 3.33
        slide.add(
            _text(
                theme,
                Box(page.width / 2 - mid_w / 2, bar_y + 0.5, mid_w, 0.7),
                case.return_multiple,
                "dataLarge",
                color="primary",
                size=32,
                align="center",
                valign="middle",
            )
        )

    achievements_y = bar_y + 1.7
    slide.add(_text(theme, Box(x, achievements_y, width, 0.3), config.localize("Key Achievements"), "heading"))
    if case.achievements:
        body_h = max(0.4, page.footer_y - achievements_y - 0.6)
        slide.add(_text(theme, Box(x, achievements_y + 0.4, width, body_h), "\n".join(case.achievements), "body"))

    add_tagline(theme, config, slide)
    return slide


def build_key_messages(
    theme: Theme,
    config: PresentationConfig,
    title: str,
    messages: Sequence[str],
) -> RenderedSlide:
    """Numbered key messages.

    Themes with the ``full-bleed`` style render on the primary colour with
    the tagline moved to the top; the ``list`` style is a regular content
    slide with the footer tagline.
    """
    page = theme.page
    title = title or config.localize(DEFAULT_KEY_MESSAGES_TITLE)
    rows = [m for m in messages if str(m).strip()][:MAX_STACKED_ROWS]

    if theme.key_messages_style == "full-bleed":
        slide = RenderedSlide(kind="key-messages", background=theme.color("primary"))
        for i in range(5):
            slide.add(
                ShapeElement(
                    kind="rect",
                    box=Box(page.width - 1.5 + i * 0.3, 0, 0.02, page.height),
                    fill=theme.color("accent"),
                    transparency=0.5 - i * 0.1,
                )
            )
        slide.add(_text(theme, Box(1, 0.8, 6, 0.6), title, "title", color="accent", size=36))
        boxes = _stacked_rows(theme, len(rows), top=1.8, bottom=page.height - 0.6, preferred=0.5)
        for number, (message, box) in enumerate(zip(rows, boxes), start=1):
            slide.add(_text(theme, Box(1, box.y, 0.5, box.h), str(number), "dataLarge", color="highlight", size=24, align="center"))
            slide.add(_text(theme, Box(1.6, box.y + 0.05, 6.5, box.h), message, "body", color="inverse", size=18))
        add_tagline(theme, config, slide, "top", color="inverse")
        return slide

    slide = _content_slide(theme, "key-messages", title)
    boxes = _stacked_rows(theme, len(rows), top=page.content_top, bottom=page.footer_y - 0.2, preferred=1.0)
    for number, (message, box) in enumerate(zip(rows, boxes), start=1):
        slide.add(_text(theme, Box(box.x, box.y, 0.5, 0.4), f"{number}.", "heading", color="primary"))
        slide.add(_text(theme, Box(box.x + 0.6, box.y, box.w - 0.6, box.h), message, "body"))
    add_tagline(theme, config, slide)
    return slide


def build_next_steps(
    theme: Theme,
    config: PresentationConfig,
    title: str,
    steps: Sequence[NextStep],
) -> RenderedSlide:
    page = theme.page
    slide = _content_slide(theme, "next-steps", title)

    rows = list(steps)[:MAX_STACKED_ROWS]
    bar_w = min(3.0, page.content_width * 0.25)
    meta_w = page.content_width * 0.22
    action_w = page.content_width - bar_w - meta_w - 0.5
    for step, box in zip(rows, _stacked_rows(theme, len(rows), top=page.content_top + 0.2, bottom=page.footer_y - 0.2, preferred=0.6)):
        slide.add(_rect(theme, Box(box.x, box.y, bar_w, box.h), "primary"))
        slide.add(_text(theme, Box(box.x + 0.2, box.y, bar_w - 0.4, box.h), step.phase, "body", color="inverse", size=14, bold=True, valign="middle"))
        slide.add(_text(theme, Box(box.x + bar_w + 0.3, box.y, action_w, box.h), step.action, "body", valign="middle"))
        if step.meta:
            slide.add(_text(theme, Box(box.right - meta_w, box.y, meta_w, box.h), step.meta, "caption", align="right", valign="middle"))

    add_tagline(theme, config, slide)
    return slide


def build_section_slide(theme: Theme, config: PresentationConfig, heading: str) -> RenderedSlide:
    page = theme.page
    slide = RenderedSlide(kind="section", background=theme.color("background"))
    box = Box(1, round(page.height * 0.4, 2), page.width - 2, 1.5)
    slide.add(_text(theme, box, heading, "sectionTitle", valign="middle"))
    add_tagline(theme, config, slide, "top")
    return slide
