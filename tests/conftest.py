"""Shared fixtures: in-memory PDFs and PNG logos."""
import io
import os
import sys

import fitz  # PyMuPDF
import pytest
from PIL import Image

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))


def make_pdf(sizes=((612, 792),), text="Page {n}", **save_kwargs) -> bytes:
    """Build a PDF with one page per (width, height), each carrying a text line."""
    doc = fitz.open()
    for n, (width, height) in enumerate(sizes, start=1):
        page = doc.new_page(width=width, height=height)
        page.insert_text((20, 20), text.format(n=n), fontsize=10)
    data = doc.tobytes(**save_kwargs)
    doc.close()
    return data


def make_png(width=200, height=100, color=(200, 30, 30, 255), fmt="PNG") -> bytes:
    """Solid-colour logo image."""
    mode = "RGBA" if fmt == "PNG" else "RGB"
    img = Image.new(mode, (width, height), color if mode == "RGBA" else color[:3])
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def letter_pdf():
    return make_pdf()


@pytest.fixture
def logo_png():
    return make_png()
