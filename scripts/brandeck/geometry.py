"""Layout geometry helpers (all values in inches).

Every helper is a deterministic function of the item count and the target
region: no measuring of text, no reflow.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Box:
    x: float
    y: float
    w: float
    h: float

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    def overlaps(self, other: "Box") -> bool:
        return self.x < other.right and other.x < self.right and self.y < other.bottom and other.y < self.bottom


def _check_count(n: int) -> int:
    count = int(n)
    if count < 0:
        raise ValueError(f"Item count must be >= 0, got {n}")
    return count


def distribute_horizontal(
    n: int,
    region: Box,
    *,
    gap: float,
    item_width: Optional[float] = None,
) -> list[Box]:
    """Split *region* into *n* side-by-side boxes separated by *gap*.

    Without *item_width* the boxes share the region width equally. With it,
    every box has that width and the row starts at the region origin.
    """
    count = _check_count(n)
    if count == 0:
        return []
    if item_width is None:
        item_width = (region.w - (count - 1) * gap) / count
    if item_width <= 0:
        raise ValueError(f"Region too narrow for {count} items (width {region.w}, gap {gap})")
    return [Box(region.x + i * (item_width + gap), region.y, item_width, region.h) for i in range(count)]


def stack_vertical(
    n: int,
    region: Box,
    *,
    gap: float,
    item_height: Optional[float] = None,
) -> list[Box]:
    """Split *region* into *n* rows separated by *gap*, top-aligned."""
    count = _check_count(n)
    if count == 0:
        return []
    if item_height is None:
        item_height = (region.h - (count - 1) * gap) / count
    if item_height <= 0:
        raise ValueError(f"Region too short for {count} rows (height {region.h}, gap {gap})")
    return [Box(region.x, region.y + i * (item_height + gap), region.w, item_height) for i in range(count)]


def column_widths(n: int, width: float) -> list[float]:
    count = _check_count(n)
    if count == 0:
        return []
    return [width / count] * count


def inset(box: Box, dx: float, dy: float = 0.0) -> Box:
    return Box(box.x + dx, box.y + dy, max(0.0, box.w - 2 * dx), max(0.0, box.h - 2 * dy))
