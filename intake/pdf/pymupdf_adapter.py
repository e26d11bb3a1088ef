from contextlib import AbstractContextManager

import pymupdf
from PIL import Image

from intake.pdf.base import RENDER_SCALE, BasePdfRenderer
from intake.pdf.exceptions import RenderError


class PyMuPdfRenderer(BasePdfRenderer):
    """Rasterizes PDF pages using PyMuPDF."""

    def open(self, pdf_bytes: bytes) -> AbstractContextManager[pymupdf.Document]:
        try:
            return pymupdf.open(stream=pdf_bytes, filetype="pdf")  # type: ignore[no-untyped-call]
        except Exception as exc:
            raise RenderError(f"pymupdf could not open document: {exc}") from exc

    def page_count(self, document: pymupdf.Document) -> int:
        return int(document.page_count)

    def render_page(
        self,
        document: pymupdf.Document,
        page_number: int,
        scale: float = RENDER_SCALE,
    ) -> Image.Image:
        self._check_page_number(document, page_number)
        try:
            page = document[page_number - 1]
            pixmap = page.get_pixmap(matrix=pymupdf.Matrix(scale, scale), alpha=False)
            return Image.frombytes("RGB", (pixmap.width, pixmap.height), pixmap.samples)
        except Exception as exc:
            raise RenderError(f"pymupdf failed to render page {page_number}: {exc}") from exc
