from unittest.mock import MagicMock, PropertyMock, patch

import pytest

from intake.pdf.exceptions import RenderError
from intake.pdf.pdfplumber_adapter import PdfPlumberRenderer


class TestPdfPlumberRenderer:
    def setup_method(self) -> None:
        self.renderer = PdfPlumberRenderer()

    def test_counts_pages(self, three_page_pdf_bytes: bytes) -> None:
        with self.renderer.open(three_page_pdf_bytes) as pdf:
            assert self.renderer.page_count(pdf) == 3

    def test_renders_rgb_page_at_double_resolution(self, sample_pdf_bytes: bytes) -> None:
        with self.renderer.open(sample_pdf_bytes) as pdf:
            image = self.renderer.render_page(pdf, 1)

        assert image.mode == "RGB"
        # Letter is 612x792 points; scale 2 doubles both sides.
        assert abs(image.width - 1224) <= 2
        assert abs(image.height - 1584) <= 2
        image.close()

    def test_page_out_of_range_raises(self, sample_pdf_bytes: bytes) -> None:
        with self.renderer.open(sample_pdf_bytes) as pdf:
            with pytest.raises(RenderError, match="out of range"):
                self.renderer.render_page(pdf, 2)

    def test_page_zero_raises(self, sample_pdf_bytes: bytes) -> None:
        with self.renderer.open(sample_pdf_bytes) as pdf:
            with pytest.raises(RenderError, match="out of range"):
                self.renderer.render_page(pdf, 0)

    def test_invalid_bytes_raise_render_error(self) -> None:
        with pytest.raises(RenderError, match="pdfplumber could not open"):
            self.renderer.open(b"this is not a pdf")

    def test_page_is_closed_when_rendering_fails(self) -> None:
        page = MagicMock()
        page.to_image.side_effect = ValueError("bad stream")
        document = MagicMock(pages=[page])

        with pytest.raises(RenderError, match="failed to render page 1"):
            self.renderer.render_page(document, 1)

        page.close.assert_called_once()

    def test_page_is_closed_after_rendering(self, sample_pdf_bytes: bytes) -> None:
        with self.renderer.open(sample_pdf_bytes) as pdf:
            page = pdf.pages[0]
            with patch.object(page, "close", wraps=page.close) as mock_close:
                self.renderer.render_page(pdf, 1).close()

        mock_close.assert_called_once()

    @patch("intake.pdf.pdfplumber_adapter.pdfplumber.open")
    def test_document_is_closed_when_page_tree_is_unreadable(self, mock_open: MagicMock) -> None:
        pdf = MagicMock()
        type(pdf).pages = PropertyMock(side_effect=ValueError("bad xref"))
        mock_open.return_value = pdf

        with pytest.raises(RenderError, match="could not open"):
            self.renderer.open(b"%PDF-1.4")

        pdf.close.assert_called_once()
