"""Tile anchor planning for the watermark grid.

Every page gets the same 5 x 5 grid regardless of its size. Anchors are
measured on the page as displayed (after /Rotate and relative to the
visible box) from its bottom-left corner, y up. On very small pages some
anchors land outside the visible area; they are kept, not clipped.
"""

import math
from typing import NamedTuple

GRID_COLUMNS = 5
GRID_ROWS = 5
TILES_PER_PAGE = GRID_COLUMNS * GRID_ROWS

MARGIN_X = 30.0
MARGIN_Y = 40.0

# Rendered tile width in document units; height follows the logo aspect ratio
TILE_WIDTH = 80.0


class TilePosition(NamedTuple):
    """Anchor of one tile: the bottom-left corner of the unrotated logo."""

    x: float
    y: float


def plan_tiles(page_width: float, page_height: float) -> tuple[TilePosition, ...]:
    """Compute the ordered tile anchors for a page.

    Order is column-major: all rows of column 0 first (bottom to top),
    then column 1, and so on.

    Raises:
        ValueError: If a dimension is not a positive finite number.
    """
    for name, value in (("width", page_width), ("height", page_height)):
        if not math.isfinite(value) or value <= 0:
            raise ValueError(f"Page {name} must be positive, got {value!r}")

    spacing_x = page_width / GRID_COLUMNS
    spacing_y = page_height / GRID_ROWS

    return tuple(
        TilePosition(i * spacing_x + MARGIN_X, j * spacing_y + MARGIN_Y)
        for i in range(GRID_COLUMNS)
        for j in range(GRID_ROWS)
    )


def rendered_height(image_width: int, image_height: int) -> float:
    """Height of a tile drawn TILE_WIDTH wide, keeping the logo aspect ratio."""
    return TILE_WIDTH * image_height / image_width
