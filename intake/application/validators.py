"""Per-step validation predicates for the application wizard.

Each guard returns a mapping of field name to a user-facing message; an
empty mapping means the step may be left. Guards never raise.
"""

from collections.abc import Callable
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from intake.application.models import (
    FACE_SCAN_TAG,
    GRADES_TAG,
    ID_TAG,
    REGISTRATION_TAG,
    ApplicationDraft,
    ApplicationStep,
)
from intake.extraction.media import MediaKind

FieldErrors = dict[str, str]

_MIN_AGE = 15
_MAX_AGE = 99
_MIN_GWA = 1.0
_MAX_GWA = 5.0


class PersonalInfo(BaseModel):
    """Personal and academic fields, still strings as typed by the applicant."""

    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    full_name: str = Field(min_length=2)
    age: str = Field(min_length=1)
    address: str = Field(min_length=5)
    school: str = Field(min_length=2)
    course: str = Field(min_length=2)
    year_level: Literal["G11", "G12", "1", "2", "3", "4"]
    gwa: str = Field(min_length=1)

    @field_validator("age")
    @classmethod
    def _age_is_whole_number(cls, value: str) -> str:
        if not value.isdigit() or not _MIN_AGE <= int(value) <= _MAX_AGE:
            raise ValueError(f"Age must be a whole number between {_MIN_AGE} and {_MAX_AGE}")
        return value

    @field_validator("gwa")
    @classmethod
    def _gwa_in_range(cls, value: str) -> str:
        try:
            gwa = float(value)
        except ValueError:
            raise ValueError("GWA must be a number") from None
        if not _MIN_GWA <= gwa <= _MAX_GWA:
            raise ValueError(f"GWA must be between {_MIN_GWA} and {_MAX_GWA}")
        return value


_FIELD_MESSAGES = {
    "full_name": "Full name is required",
    "age": "Age is required",
    "address": "Address is required",
    "school": "School is required",
    "course": "Course is required",
    "year_level": "Year level must be one of G11, G12, 1, 2, 3, 4",
    "gwa": "GWA is required",
}


def validate_type_selection(draft: ApplicationDraft) -> FieldErrors:
    if draft.application_type is None:
        return {"application_type": "Please choose a new or renewal application"}
    return {}


def validate_id_upload(draft: ApplicationDraft) -> FieldErrors:
    return _require_document(draft, ID_TAG, "ID document is required")


def validate_face_scan(draft: ApplicationDraft) -> FieldErrors:
    document = draft.documents.get(FACE_SCAN_TAG)
    if document is None:
        return {FACE_SCAN_TAG: "Face scan is required"}
    if document.media_kind is not MediaKind.IMAGE:
        return {FACE_SCAN_TAG: "Face scan must be an image"}
    return {}


def validate_personal_info(draft: ApplicationDraft) -> FieldErrors:
    try:
        PersonalInfo.model_validate(
            {name: draft.field_value(name) for name in _FIELD_MESSAGES}
        )
    except ValidationError as exc:
        return _field_errors(exc)
    return {}


def validate_document_upload(draft: ApplicationDraft) -> FieldErrors:
    errors = _require_document(draft, GRADES_TAG, "Certificate of grades is required")
    errors.update(
        _require_document(
            draft, REGISTRATION_TAG, "Certificate of registration is required"
        )
    )
    return errors


def _require_document(draft: ApplicationDraft, tag: str, message: str) -> FieldErrors:
    document = draft.documents.get(tag)
    if document is None:
        return {tag: message}
    if document.media_kind is MediaKind.UNSUPPORTED:
        return {tag: "Unsupported file type. Please upload an image or PDF."}
    return {}


def _field_errors(exc: ValidationError) -> FieldErrors:
    errors: FieldErrors = {}
    for error in exc.errors():
        name = str(error["loc"][0]) if error["loc"] else "__all__"
        if name in errors:
            continue
        if error["type"] in {"string_too_short", "missing"} or name == "year_level":
            errors[name] = _FIELD_MESSAGES.get(name, error["msg"])
        else:
            errors[name] = error["msg"].removeprefix("Value error, ")
    return errors


STEP_GUARDS: dict[ApplicationStep, Callable[[ApplicationDraft], FieldErrors]] = {
    ApplicationStep.TYPE_SELECTION: validate_type_selection,
    ApplicationStep.ID_UPLOAD: validate_id_upload,
    ApplicationStep.FACE_SCAN: validate_face_scan,
    ApplicationStep.PERSONAL_INFO: validate_personal_info,
    ApplicationStep.DOCUMENT_UPLOAD: validate_document_upload,
}
