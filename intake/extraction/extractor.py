"""OCR-based text extraction for uploaded application documents.

Images go straight to the OCR engine. PDFs are rasterized page by page and
each page image is recognized before the next page is rendered, so only one
full-resolution page is held in memory at a time. Any failure aborts the
whole document: the caller gets an empty text and an error message, never an
exception and never the text of the pages that did succeed.
"""

import io
from collections.abc import Callable

from PIL import Image

from intake.config.settings import Settings
from intake.extraction.media import MediaKind
from intake.extraction.models import ExtractionResult, ProgressEvent, UploadedDocument
from intake.extraction.progress import (
    CallbackProgressReporter,
    NullProgressReporter,
    ProgressReporter,
    fraction_to_percent,
    page_percent,
)
from intake.logging.logger import Log
from intake.ocr.base import BaseOcrEngine
from intake.ocr.tesseract_adapter import TesseractAdapter
from intake.pdf.base import RENDER_SCALE, BasePdfRenderer
from intake.pdf.factory import PdfRendererFactory

UNSUPPORTED_FILE_TYPE_ERROR = "Unsupported file type. Please upload an image or PDF."
IMAGE_FAILURE_FALLBACK = "Failed to process image"
PDF_FAILURE_FALLBACK = "Failed to process PDF"
RECOGNIZING_STATUS = "Recognizing text..."


class DocumentExtractor:
    """Dispatches a document to the image or PDF path and never raises."""

    def __init__(self, ocr_engine: BaseOcrEngine, pdf_renderer: BasePdfRenderer) -> None:
        self._ocr_engine = ocr_engine
        self._pdf_renderer = pdf_renderer

    def extract(
        self,
        document: UploadedDocument,
        reporter: ProgressReporter | None = None,
    ) -> ExtractionResult:
        reporter = reporter or NullProgressReporter()
        kind = document.media_kind
        Log.info(
            f"Extracting text from '{document.file_name}' "
            f"({kind.value}, {document.size_bytes} bytes, tag '{document.field_tag}')"
        )
        match kind:
            case MediaKind.PDF:
                return self._guarded(document, PDF_FAILURE_FALLBACK, self._extract_pdf, reporter)
            case MediaKind.IMAGE:
                return self._guarded(
                    document, IMAGE_FAILURE_FALLBACK, self._extract_image, reporter
                )
            case MediaKind.UNSUPPORTED:
                Log.warning(
                    f"Unsupported file type for '{document.file_name}' "
                    f"(declared '{document.mime_type}')"
                )
                return ExtractionResult(text="", error=UNSUPPORTED_FILE_TYPE_ERROR)

    def _guarded(
        self,
        document: UploadedDocument,
        fallback_message: str,
        path: Callable[[UploadedDocument, ProgressReporter], str],
        reporter: ProgressReporter,
    ) -> ExtractionResult:
        try:
            text = path(document, reporter)
        except Exception as exc:
            Log.error(f"Text extraction failed for '{document.file_name}': {exc}")
            return ExtractionResult(text="", error=str(exc) or fallback_message)
        Log.info(f"Extracted {len(text)} chars from '{document.file_name}'")
        return ExtractionResult(text=text)

    def _extract_image(self, document: UploadedDocument, reporter: ProgressReporter) -> str:
        def on_fraction(fraction: float) -> None:
            _emit(reporter, RECOGNIZING_STATUS, fraction_to_percent(fraction))

        with Image.open(io.BytesIO(document.content)) as image:
            image.load()
            text = self._ocr_engine.recognize(image, on_fraction)
        return text.strip()

    def _extract_pdf(self, document: UploadedDocument, reporter: ProgressReporter) -> str:
        page_texts: list[str] = []
        with self._pdf_renderer.open(document.content) as pdf:
            page_count = self._pdf_renderer.page_count(pdf)
            Log.debug(f"'{document.file_name}' has {page_count} pages")
            for page_number in range(1, page_count + 1):
                status = f"Processing page {page_number} of {page_count}..."

                def on_fraction(
                    fraction: float,
                    page_number: int = page_number,
                    status: str = status,
                ) -> None:
                    _emit(reporter, status, page_percent(page_number, page_count, fraction))

                image = self._pdf_renderer.render_page(pdf, page_number, RENDER_SCALE)
                try:
                    page_texts.append(self._ocr_engine.recognize(image, on_fraction))
                finally:
                    image.close()
        return "\n".join(page_texts).strip()


def _emit(reporter: ProgressReporter, status: str, percent: int) -> None:
    try:
        reporter.report(ProgressEvent(status=status, percent=percent))
    except Exception as exc:
        # A broken consumer must not fail the extraction.
        Log.warning(f"Progress reporter raised: {exc}")


def build_extractor(settings: Settings) -> DocumentExtractor:
    """Build a DocumentExtractor with the configured OCR engine and PDF renderer."""
    ocr_engine = TesseractAdapter(
        language=settings.ocr_language,
        tesseract_cmd=settings.ocr_tesseract_cmd,
        psm_mode=settings.ocr_psm_mode,
    )
    return DocumentExtractor(
        ocr_engine=ocr_engine,
        pdf_renderer=PdfRendererFactory.create(settings),
    )


def extract_text(
    document: UploadedDocument,
    on_progress: Callable[[ProgressEvent], None] | None = None,
    extractor: DocumentExtractor | None = None,
) -> ExtractionResult:
    """Extract text from a document, optionally reporting progress to a callback."""
    extractor = extractor or build_extractor(Settings())
    reporter = CallbackProgressReporter(on_progress) if on_progress else None
    return extractor.extract(document, reporter)
