import io
from contextlib import AbstractContextManager

import pdfplumber
from PIL import Image

from intake.pdf.base import RENDER_SCALE, BasePdfRenderer
from intake.pdf.exceptions import RenderError

_POINTS_PER_INCH = 72


class PdfPlumberRenderer(BasePdfRenderer):
    """Rasterizes PDF pages using pdfplumber (pypdfium2 underneath)."""

    def open(self, pdf_bytes: bytes) -> AbstractContextManager[pdfplumber.PDF]:
        try:
            pdf = pdfplumber.open(io.BytesIO(pdf_bytes))
        except Exception as exc:
            raise RenderError(f"pdfplumber could not open document: {exc}") from exc
        try:
            # pdfplumber parses lazily; touching the page list surfaces corrupt input here.
            _ = len(pdf.pages)
        except Exception as exc:
            pdf.close()
            raise RenderError(f"pdfplumber could not open document: {exc}") from exc
        return pdf

    def page_count(self, document: pdfplumber.PDF) -> int:
        return len(document.pages)

    def render_page(
        self,
        document: pdfplumber.PDF,
        page_number: int,
        scale: float = RENDER_SCALE,
    ) -> Image.Image:
        self._check_page_number(document, page_number)
        page = document.pages[page_number - 1]
        try:
            page_image = page.to_image(resolution=int(_POINTS_PER_INCH * scale))
            return page_image.original.convert("RGB")
        except Exception as exc:
            raise RenderError(
                f"pdfplumber failed to render page {page_number}: {exc}"
            ) from exc
        finally:
            page.close()
