from intake.extraction.extractor import DocumentExtractor, build_extractor, extract_text
from intake.extraction.media import MediaKind, resolve_media_kind
from intake.extraction.models import ExtractionResult, ProgressEvent, UploadedDocument

__all__ = [
    "DocumentExtractor",
    "ExtractionResult",
    "MediaKind",
    "ProgressEvent",
    "UploadedDocument",
    "build_extractor",
    "extract_text",
    "resolve_media_kind",
]
