import threading

import pytesseract
from PIL import Image

from intake.ocr.base import BaseOcrEngine, FractionCallback
from intake.ocr.exceptions import OcrError


class TesseractAdapter(BaseOcrEngine):
    """Recognizes text with the Tesseract binary through pytesseract.

    Tesseract exposes no incremental progress, so the callback only sees
    the start (0.0) and the end (1.0) of recognition.
    """

    # pytesseract reads the binary path from a module global.
    _cmd_lock = threading.Lock()

    def __init__(
        self,
        *,
        language: str = "eng",
        tesseract_cmd: str = "tesseract",
        psm_mode: int = 3,
    ) -> None:
        self._language = language
        self._psm_mode = psm_mode
        self._tesseract_cmd = tesseract_cmd or "tesseract"

    def recognize(
        self,
        image: Image.Image,
        on_progress: FractionCallback | None = None,
    ) -> str:
        if on_progress is not None:
            on_progress(0.0)
        try:
            with self._cmd_lock:
                pytesseract.pytesseract.tesseract_cmd = self._tesseract_cmd
                text = pytesseract.image_to_string(
                    image,
                    lang=self._language,
                    config=f"--psm {self._psm_mode}",
                )
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError, OSError) as exc:
            raise OcrError(f"tesseract recognition failed: {exc}") from exc
        if on_progress is not None:
            on_progress(1.0)
        return text or ""
