"""Brand themes: colour palettes, typography presets and page metrics.

Themes are immutable and built once at import time. Both brands feed the
same slide builders; only the values below differ.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Mapping, Optional

from .errors import UnknownBrand

_HEX_RE = re.compile(r"#?([0-9A-Fa-f]{6})")


def normalize_hex(value: object) -> Optional[str]:
    """Return an upper-case ``RRGGBB`` string, or None when *value* is not a hex colour."""
    if not isinstance(value, str):
        return None
    match = _HEX_RE.fullmatch(value.strip())
    return match.group(1).upper() if match else None


@dataclass(frozen=True)
class TextStyle:
    size: float
    color: str  # palette role
    font: str
    bold: bool = False
    char_spacing: float = 0.0


@dataclass(frozen=True)
class PageLayout:
    """Page size and the fixed anchors every content slide shares (inches)."""

    width: float
    height: float
    margin_x: float
    title_y: float
    title_h: float
    content_top: float
    footer_y: float
    footer_h: float
    header_rule_y: Optional[float] = None

    @property
    def content_width(self) -> float:
        return self.width - 2 * self.margin_x


@dataclass(frozen=True)
class Theme:
    brand: str
    name: str
    description: str
    palette: Mapping[str, str]
    typography: Mapping[str, TextStyle]
    page: PageLayout
    tagline_anchor: str = "bottom"
    key_messages_style: str = "list"
    edge_accent: bool = False
    default_organisation: str = "Your Organisation"
    default_tagline: str = ""

    def color(self, value: Optional[str], default: str = "text") -> str:
        """Resolve a palette role or a literal hex colour, falling back to *default* (a role)."""
        if value:
            if value in self.palette:
                return self.palette[value]
            parsed = normalize_hex(value)
            if parsed:
                return parsed
        return self.palette[default]

    def style(self, role: str) -> TextStyle:
        return self.typography[role]

    def with_primary(self, primary: Optional[str]) -> "Theme":
        """Return a copy whose ``primary`` role is *primary* (hex); unchanged when None/invalid."""
        parsed = normalize_hex(primary) if primary else None
        if not parsed or parsed == self.palette["primary"]:
            return self
        palette = dict(self.palette)
        palette["primary"] = parsed
        return replace(self, palette=MappingProxyType(palette))


_DATA_COLORS = {
    "dataPositive": "70AD47",
    "dataNeutral": "ED7D31",
    "dataNegative": "C5504B",
    "dataPurple": "7030A0",
    "dataNavy": "244061",
    "dataAlert": "C00000",
}


def _corporate() -> Theme:
    palette = {
        "primary": "003A70",
        "secondary": "0076A8",
        "accent": "00B5A0",
        "highlight": "FDB913",
        "text": "2D2D2D",
        "muted": "58595B",
        "rule": "D0D0CE",
        "surface": "F5F5F0",
        "background": "FFFFFF",
        "inverse": "FFFFFF",
        **_DATA_COLORS,
    }
    light, regular, semibold = "Segoe UI Light", "Segoe UI", "Segoe UI Semibold"
    typography = {
        "title": TextStyle(44, "primary", light),
        "sectionTitle": TextStyle(28, "primary", light),
        "slideTitle": TextStyle(24, "primary", light),
        "heading": TextStyle(16, "text", semibold, bold=True),
        "subheading": TextStyle(18, "muted", regular),
        "body": TextStyle(12, "text", regular),
        "caption": TextStyle(11, "muted", regular),
        "tagline": TextStyle(9, "muted", regular, char_spacing=2),
        "dataLarge": TextStyle(32, "primary", light),
        "dataSmall": TextStyle(14, "text", semibold, bold=True),
        "table": TextStyle(10, "text", regular),
    }
    page = PageLayout(
        width=10.0,
        height=5.625,
        margin_x=0.5,
        title_y=0.2,
        title_h=0.5,
        content_top=1.2,
        footer_y=5.25,
        footer_h=0.25,
        header_rule_y=0.7,
    )
    return Theme(
        brand="corporate",
        name="Corporate",
        description="Professional consulting-style presentations with a blue/teal colour scheme",
        palette=MappingProxyType(palette),
        typography=MappingProxyType(typography),
        page=page,
        tagline_anchor="bottom",
        key_messages_style="full-bleed",
        edge_accent=True,
        default_organisation="Your Organisation",
        default_tagline="",
    )


def _investment() -> Theme:
    palette = {
        "primary": "FF6C2C",
        "secondary": "292B29",
        "accent": "FF8C42",
        "highlight": "FF6C2C",
        "text": "292929",
        "muted": "5F625F",
        "rule": "F2F2F2",
        "surface": "F2F2F2",
        "background": "FFFFFF",
        "inverse": "FFFFFF",
        **_DATA_COLORS,
    }
    light, regular = "Calibri Light", "Calibri"
    typography = {
        "title": TextStyle(44, "text", regular),
        "sectionTitle": TextStyle(32, "text", regular, bold=True),
        "slideTitle": TextStyle(28, "text", regular, bold=True),
        "heading": TextStyle(20, "text", regular, bold=True),
        "subheading": TextStyle(18, "text", regular, bold=True),
        "body": TextStyle(14, "text", regular),
        "caption": TextStyle(11, "muted", regular),
        "tagline": TextStyle(11, "muted", light, char_spacing=2),
        "dataLarge": TextStyle(36, "text", light),
        "dataSmall": TextStyle(20, "text", regular, bold=True),
        "table": TextStyle(12, "text", regular),
    }
    page = PageLayout(
        width=13.333,
        height=7.5,
        margin_x=0.75,
        title_y=0.75,
        title_h=0.5,
        content_top=1.8,
        footer_y=6.8,
        footer_h=0.3,
    )
    return Theme(
        brand="investment",
        name="Investment",
        description="Investment-focused presentations with orange/charcoal branding",
        palette=MappingProxyType(palette),
        typography=MappingProxyType(typography),
        page=page,
        tagline_anchor="bottom",
        key_messages_style="list",
        default_organisation="Your Organisation",
        default_tagline="STRAIGHT TALKING, FORWARD THINKING INVESTMENT",
    )


THEMES: Mapping[str, Theme] = MappingProxyType({t.brand: t for t in (_corporate(), _investment())})


def resolve_theme(brand: str) -> Theme:
    """Return the registered theme for *brand* or raise :class:`UnknownBrand`."""
    key = str(brand or "").strip().lower()
    theme = THEMES.get(key)
    if theme is None:
        raise UnknownBrand(str(brand), list(THEMES))
    return theme


def available_brands() -> list[str]:
    return list(THEMES)
