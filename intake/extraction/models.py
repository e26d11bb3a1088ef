import hashlib
from dataclasses import dataclass
from functools import cached_property

from intake.extraction.media import MediaKind, resolve_media_kind


@dataclass(frozen=True)
class UploadedDocument:
    """One user-supplied file, owned by the step that received it."""

    content: bytes
    file_name: str
    mime_type: str
    field_tag: str

    @cached_property
    def media_kind(self) -> MediaKind:
        return resolve_media_kind(self.mime_type, self.file_name)

    @property
    def size_bytes(self) -> int:
        return len(self.content)

    @cached_property
    def sha256(self) -> str:
        return hashlib.sha256(self.content).hexdigest()

    def reference(self) -> dict[str, object]:
        """Metadata stored alongside the application in place of the raw bytes."""
        return {
            "field_tag": self.field_tag,
            "file_name": self.file_name,
            "mime_type": self.mime_type,
            "media_kind": self.media_kind.value,
            "size_bytes": self.size_bytes,
            "sha256": self.sha256,
        }


@dataclass(frozen=True)
class ExtractionResult:
    """Text extracted from one document, or the reason extraction failed."""

    text: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ProgressEvent:
    """Coarse progress update emitted while a document is being extracted."""

    status: str
    percent: int
