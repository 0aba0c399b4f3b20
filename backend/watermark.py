"""Rotated, semi-transparent logo tiles stamped onto PDF pages."""

import io
import logging
import math
from dataclasses import dataclass, field

import fitz  # PyMuPDF
from PIL import Image

from errors import ImageFormatError, MissingInputError
from geometry import TILE_WIDTH, TilePosition, rendered_height

logger = logging.getLogger(__name__)

TILE_OPACITY = 0.25
TILE_ROTATION = 45.0  # degrees, counter-clockwise

# Logos wider than this are downsampled before fading/rotating (~288 dpi at 80pt)
TILE_RASTER_MAX_WIDTH = 320


@dataclass(frozen=True)
class WatermarkImage:
    """A decoded PNG logo, ready to be stamped.

    ``width``/``height`` are the intrinsic pixel dimensions of the source
    image. ``tile_png`` holds the faded and rotated raster that is embedded
    into documents; it is built once and shared by every tile.
    """

    width: int
    height: int
    tile_png: bytes = field(repr=False)

    @property
    def tile_height(self) -> float:
        """Rendered height of an unrotated tile in document units."""
        return rendered_height(self.width, self.height)

    @classmethod
    def from_bytes(cls, data: bytes) -> "WatermarkImage":
        """Decode PNG bytes into a WatermarkImage.

        Raises:
            MissingInputError: If ``data`` is empty.
            ImageFormatError: If ``data`` is not a decodable PNG.
        """
        if not data:
            raise MissingInputError("Watermark image is empty")

        try:
            with Image.open(io.BytesIO(data)) as img:
                if img.format != "PNG":
                    raise ImageFormatError(f"Watermark must be a PNG image, got {img.format}")
                logo = img.convert("RGBA")
        except ImageFormatError:
            raise
        except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
            raise ImageFormatError(f"Cannot decode watermark image: {e}") from e

        width, height = logo.size
        return cls(width=width, height=height, tile_png=_render_tile(logo))


def _render_tile(logo: Image.Image) -> bytes:
    """Fade and rotate the logo, returning the result as PNG bytes."""
    if logo.width > TILE_RASTER_MAX_WIDTH:
        scaled_h = max(1, round(logo.height * TILE_RASTER_MAX_WIDTH / logo.width))
        logo = logo.resize((TILE_RASTER_MAX_WIDTH, scaled_h), Image.LANCZOS)

    alpha = logo.getchannel("A").point(lambda p: int(p * TILE_OPACITY))
    logo.putalpha(alpha)

    rotated = logo.rotate(TILE_ROTATION, resample=Image.BICUBIC, expand=True)

    buf = io.BytesIO()
    rotated.save(buf, format="PNG")
    return buf.getvalue()


def tile_rect(page_height: float, position: TilePosition, image: WatermarkImage) -> fitz.Rect:
    """Rectangle covered by a rotated tile, in PyMuPDF page coordinates.

    The unrotated logo has its bottom-left corner at ``position`` (displayed
    page, y up) and is turned TILE_ROTATION degrees about that corner. The
    returned rect is the bounding box of the turned logo, flipped into the
    top-left origin of ``page.rect`` so the pre-rotated raster can be placed
    into it. PyMuPDF maps that rect onto rotated or offset pages itself.
    """
    theta = math.radians(TILE_ROTATION)
    cos_t, sin_t = math.cos(theta), math.sin(theta)
    w, h = TILE_WIDTH, image.tile_height

    corners = [(0.0, 0.0), (w, 0.0), (0.0, h), (w, h)]
    xs = [position.x + cx * cos_t - cy * sin_t for cx, cy in corners]
    ys = [position.y + cx * sin_t + cy * cos_t for cx, cy in corners]

    return fitz.Rect(min(xs), page_height - max(ys), max(xs), page_height - min(ys))


class TileCompositor:
    """Stamps one WatermarkImage onto the pages of a single document.

    The tile raster is embedded on the first stamp; every later stamp, on
    any page of the same document, references that image object.
    """

    def __init__(self, image: WatermarkImage) -> None:
        self.image = image
        self.tiles = 0
        self._xref = 0

    def stamp(self, page: fitz.Page, position: TilePosition) -> fitz.Page:
        """Draw one tile over the existing page content."""
        rect = tile_rect(page.rect.height, position, self.image)
        if self._xref:
            page.insert_image(rect, xref=self._xref, keep_proportion=False, overlay=True)
        else:
            self._xref = page.insert_image(
                rect,
                stream=self.image.tile_png,
                keep_proportion=False,
                overlay=True,
            )
            logger.debug("Embedded watermark tile as xref %d", self._xref)
        self.tiles += 1
        return page
