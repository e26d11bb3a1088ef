from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any

from PIL import Image

from intake.pdf.exceptions import RenderError

# Render at twice the PDF's native 72 points per inch: a balance between
# OCR accuracy and render cost.
RENDER_SCALE = 2.0


class BasePdfRenderer(ABC):
    """Contract for all PDF page rasterization adapters.

    Pages are numbered from 1. The document handle returned by `open` is
    engine specific and must only be passed back to the same adapter.
    """

    @abstractmethod
    def open(self, pdf_bytes: bytes) -> AbstractContextManager[Any]:
        """Open a PDF for rendering.

        Raises:
            RenderError: if the bytes are not a readable PDF.
        """

    @abstractmethod
    def page_count(self, document: Any) -> int:
        """Number of pages in an opened document."""

    @abstractmethod
    def render_page(
        self,
        document: Any,
        page_number: int,
        scale: float = RENDER_SCALE,
    ) -> Image.Image:
        """Rasterize one page into an RGB image the caller must close.

        Raises:
            RenderError: if the page is out of range or the engine fails.
        """

    def _check_page_number(self, document: Any, page_number: int) -> None:
        count = self.page_count(document)
        if not 1 <= page_number <= count:
            raise RenderError(f"Page {page_number} is out of range (document has {count} pages)")
