from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from intake.extraction.models import UploadedDocument

ID_TAG = "id"
FACE_SCAN_TAG = "face-scan"
GRADES_TAG = "certificate-of-grades"
REGISTRATION_TAG = "certificate-of-registration"

PERSONAL_FIELDS = (
    "full_name",
    "age",
    "address",
    "school",
    "course",
    "year_level",
    "gwa",
)


class ApplicationType(str, Enum):
    NEW = "NEW"
    RENEWAL = "RENEWAL"


class ApplicationStatus(str, Enum):
    PENDING = "PENDING"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ApplicationStep(int, Enum):
    """Wizard states, in the only order they can be visited."""

    TYPE_SELECTION = 1
    ID_UPLOAD = 2
    FACE_SCAN = 3
    PERSONAL_INFO = 4
    DOCUMENT_UPLOAD = 5
    FINALIZED = 6

    @property
    def label(self) -> str:
        return _STEP_LABELS[self]


_STEP_LABELS = {
    ApplicationStep.TYPE_SELECTION: "Application Type",
    ApplicationStep.ID_UPLOAD: "Upload ID",
    ApplicationStep.FACE_SCAN: "Face Scan",
    ApplicationStep.PERSONAL_INFO: "Personal Info",
    ApplicationStep.DOCUMENT_UPLOAD: "Upload Documents",
    ApplicationStep.FINALIZED: "Submitted",
}


@dataclass
class ApplicationDraft:
    """Form state accumulated by the step machine for a single session."""

    application_type: ApplicationType | None = None
    fields: dict[str, str] = field(default_factory=dict)
    documents: dict[str, UploadedDocument] = field(default_factory=dict)
    ocr_text: dict[str, str] = field(default_factory=dict)

    def field_value(self, name: str) -> str:
        return self.fields.get(name, "")


@dataclass(frozen=True)
class StepResult:
    """Outcome of an `advance()` call."""

    advanced: bool
    step: ApplicationStep
    errors: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class FinalizedApplication:
    """Immutable snapshot handed to the submission orchestrator."""

    id: str
    application_type: ApplicationType
    fields: Mapping[str, str]
    documents: tuple[UploadedDocument, ...]
    ocr_text: Mapping[str, str]
    submitted_at: datetime

    @classmethod
    def from_draft(
        cls,
        draft: ApplicationDraft,
        *,
        application_id: str,
        submitted_at: datetime,
    ) -> "FinalizedApplication":
        if draft.application_type is None:
            raise ValueError("Cannot finalize a draft without an application type")
        return cls(
            id=application_id,
            application_type=draft.application_type,
            fields=MappingProxyType(dict(draft.fields)),
            documents=tuple(draft.documents[tag] for tag in sorted(draft.documents)),
            ocr_text=MappingProxyType(dict(draft.ocr_text)),
            submitted_at=submitted_at,
        )

    def document(self, tag: str) -> UploadedDocument | None:
        for document in self.documents:
            if document.field_tag == tag:
                return document
        return None

    def details_payload(self) -> dict[str, object]:
        """Free-form details stored as the record's JSON payload."""
        return {name: self.fields.get(name, "") for name in PERSONAL_FIELDS}

    def document_references(self) -> list[dict[str, object]]:
        return [document.reference() for document in self.documents]
