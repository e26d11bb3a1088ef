class OcrError(Exception):
    """Raised when the OCR engine fails to recognize an image."""
