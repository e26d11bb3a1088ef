"""Resolve an upload to a media kind once, at the boundary."""

import mimetypes
from enum import Enum

PDF_MIME_TYPE = "application/pdf"
_GENERIC_MIME_TYPES = frozenset({"", "application/octet-stream", "binary/octet-stream"})


class MediaKind(str, Enum):
    """What an uploaded file is, as far as text extraction is concerned."""

    IMAGE = "image"
    PDF = "pdf"
    UNSUPPORTED = "unsupported"


def resolve_media_kind(mime_type: str | None, file_name: str | None) -> MediaKind:
    """Classify by declared MIME type first, then by file-name extension.

    The extension is only consulted when the declared type does not settle
    the question (missing, generic, or neither PDF nor image).
    """
    kind = _kind_from_mime(mime_type)
    if kind is not MediaKind.UNSUPPORTED:
        return kind
    if not file_name:
        return MediaKind.UNSUPPORTED
    guessed, _ = mimetypes.guess_type(file_name.lower())
    return _kind_from_mime(guessed)


def _kind_from_mime(mime_type: str | None) -> MediaKind:
    normalized = (mime_type or "").split(";", 1)[0].strip().lower()
    if normalized in _GENERIC_MIME_TYPES:
        return MediaKind.UNSUPPORTED
    if normalized == PDF_MIME_TYPE:
        return MediaKind.PDF
    if normalized.startswith("image/"):
        return MediaKind.IMAGE
    return MediaKind.UNSUPPORTED
