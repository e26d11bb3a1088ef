import io

import pytest
from PIL import Image
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Certificate of Grades")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def three_page_pdf_bytes() -> bytes:
    """Generate a three-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    for number in ("one", "two", "three"):
        c.drawString(72, 720, f"Page {number} content")
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def png_bytes() -> bytes:
    """A small white PNG, enough for the image path to open."""
    buf = io.BytesIO()
    Image.new("RGB", (64, 32), color="white").save(buf, format="PNG")
    return buf.getvalue()
