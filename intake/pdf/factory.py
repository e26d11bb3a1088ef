from intake.config.settings import Settings
from intake.logging.logger import Log
from intake.pdf.base import BasePdfRenderer
from intake.pdf.pdfplumber_adapter import PdfPlumberRenderer
from intake.pdf.pymupdf_adapter import PyMuPdfRenderer


class PdfRendererFactory:
    """Picks the page rasterizer used before OCR of uploaded PDFs."""

    RENDERERS: dict[str, type[BasePdfRenderer]] = {
        "pdfplumber": PdfPlumberRenderer,
        "pymupdf": PyMuPdfRenderer,
    }

    @classmethod
    def create(cls, settings: Settings) -> BasePdfRenderer:
        engine = settings.pdf_engine.strip().lower()
        renderer_cls = cls.RENDERERS.get(engine)
        if renderer_cls is None:
            raise ValueError(
                f"Unknown PDF page renderer '{engine}' for PDF_ENGINE. "
                f"Supported renderers: {', '.join(sorted(cls.RENDERERS))}"
            )
        Log.debug(f"Rasterizing PDF pages with {engine}")
        return renderer_cls()
