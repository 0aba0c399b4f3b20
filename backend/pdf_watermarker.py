"""Core PDF watermarking engine using PyMuPDF (fitz).

Loads a PDF, stamps the tiled logo grid onto every page in order and
serializes the result. Processing is all-or-nothing: any failure aborts the
whole document and no bytes are returned.
"""

import logging
from dataclasses import dataclass

import fitz  # PyMuPDF

from errors import CompositionError, DocumentLoadError, EmptyDocumentError
from geometry import plan_tiles
from watermark import TileCompositor, WatermarkImage

logger = logging.getLogger(__name__)


@dataclass
class WatermarkResult:
    """Output of a watermarking run."""

    pdf_bytes: bytes
    page_count: int
    tile_count: int


def load_document(document_bytes: bytes, ignore_encryption: bool = True) -> fitz.Document:
    """Open PDF bytes for modification.

    A document that declares encryption is still opened when it carries no
    user password, unless ``ignore_encryption`` is False. Documents that do
    need a user password are always rejected.

    Raises:
        EmptyDocumentError: If ``document_bytes`` is empty.
        DocumentLoadError: If the bytes are not a usable PDF.
    """
    if not document_bytes:
        raise EmptyDocumentError("Document is empty")

    try:
        doc = fitz.open(stream=document_bytes, filetype="pdf")
    except (RuntimeError, ValueError) as e:
        raise DocumentLoadError(f"Cannot parse document: {e}") from e

    try:
        encrypted = doc.needs_pass or bool((doc.metadata or {}).get("encryption"))
        if encrypted and not ignore_encryption:
            raise DocumentLoadError("Document is encrypted")
        if doc.needs_pass and not doc.authenticate(""):
            raise DocumentLoadError("Document requires a password")
        if doc.page_count == 0:
            raise DocumentLoadError("Document has no pages")
    except DocumentLoadError:
        doc.close()
        raise

    if encrypted:
        logger.info("Processing document that declares encryption")
    return doc


def watermark_document(
    document_bytes: bytes,
    image: WatermarkImage,
    ignore_encryption: bool = True,
) -> WatermarkResult:
    """Stamp the watermark grid onto every page of a PDF.

    Args:
        document_bytes: Source PDF.
        image: Decoded logo, shared read-only by every tile.
        ignore_encryption: Process documents that declare encryption.

    Returns:
        WatermarkResult with the new PDF bytes and page/tile counts.

    Raises:
        DocumentLoadError: If the document cannot be loaded.
        CompositionError: If stamping any page fails.
    """
    doc = load_document(document_bytes, ignore_encryption=ignore_encryption)
    compositor = TileCompositor(image)

    try:
        page_count = doc.page_count
        for page_num, page in enumerate(doc):
            positions = plan_tiles(page.rect.width, page.rect.height)
            try:
                for position in positions:
                    compositor.stamp(page, position)
            except (RuntimeError, ValueError) as e:
                raise CompositionError(f"Failed to stamp page {page_num + 1}: {e}") from e
            logger.debug(
                "Page %d (%.1f x %.1f): stamped %d tiles",
                page_num + 1,
                page.rect.width,
                page.rect.height,
                len(positions),
            )

        # Keep the source encryption and permissions as declared
        output_bytes = doc.tobytes(deflate=True, garbage=4, encryption=fitz.PDF_ENCRYPT_KEEP)
    finally:
        doc.close()

    logger.info("Watermarked %d pages with %d tiles", page_count, compositor.tiles)
    return WatermarkResult(
        pdf_bytes=output_bytes,
        page_count=page_count,
        tile_count=compositor.tiles,
    )


def apply_watermark(
    document_bytes: bytes,
    image: WatermarkImage,
    ignore_encryption: bool = True,
) -> bytes:
    """Return ``document_bytes`` with the watermark grid on every page."""
    return watermark_document(document_bytes, image, ignore_encryption=ignore_encryption).pdf_bytes
