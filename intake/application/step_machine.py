"""Linear, validated wizard that assembles one scholarship application.

TYPE_SELECTION -> ID_UPLOAD -> FACE_SCAN -> PERSONAL_INFO -> DOCUMENT_UPLOAD -> FINALIZED

Moving forward requires the current step's guard to pass; a failing guard
leaves the machine where it is and reports field errors. Going back keeps
everything entered in later steps. Reaching FINALIZED snapshots the draft
into a FinalizedApplication exactly once.
"""

import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from types import MappingProxyType

from intake.application.exceptions import StepMachineError
from intake.application.models import (
    ApplicationDraft,
    ApplicationStep,
    ApplicationType,
    FinalizedApplication,
    StepResult,
)
from intake.application.prefill import prefill_fields
from intake.application.validators import STEP_GUARDS, FieldErrors
from intake.extraction.models import ExtractionResult, UploadedDocument
from intake.logging.logger import Log


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _new_application_id() -> str:
    return str(uuid.uuid4())


class StepMachine:
    """Drives a single application draft through the wizard steps."""

    def __init__(
        self,
        draft: ApplicationDraft | None = None,
        *,
        clock: Callable[[], datetime] = _utc_now,
        id_factory: Callable[[], str] = _new_application_id,
    ) -> None:
        self._draft = draft or ApplicationDraft()
        self._clock = clock
        self._id_factory = id_factory
        self._step = ApplicationStep.TYPE_SELECTION
        self._passed: set[ApplicationStep] = set()
        self._finalized: FinalizedApplication | None = None

    @property
    def step(self) -> ApplicationStep:
        return self._step

    @property
    def draft(self) -> ApplicationDraft:
        return self._draft

    @property
    def finalized(self) -> FinalizedApplication | None:
        return self._finalized

    def errors_for(self, step: ApplicationStep) -> FieldErrors:
        """Current validation errors of a step, without moving the machine."""
        guard = STEP_GUARDS.get(step)
        return guard(self._draft) if guard else {}

    # Draft mutation

    def select_type(self, application_type: ApplicationType) -> None:
        self._ensure_open()
        self._draft.application_type = ApplicationType(application_type)

    def update_fields(self, **fields: str) -> None:
        """Set form fields; the last value written for a field wins."""
        self._ensure_open()
        for name, value in fields.items():
            self._draft.fields[name] = "" if value is None else str(value)

    def attach_document(self, document: UploadedDocument) -> None:
        """Attach a document, replacing any previous upload with the same tag."""
        self._ensure_open()
        self._draft.documents[document.field_tag] = document
        self._draft.ocr_text.pop(document.field_tag, None)
        Log.debug(f"Attached '{document.file_name}' as '{document.field_tag}'")

    def remove_document(self, field_tag: str) -> None:
        self._ensure_open()
        self._draft.documents.pop(field_tag, None)
        self._draft.ocr_text.pop(field_tag, None)

    def record_extraction(self, document: UploadedDocument, result: ExtractionResult) -> bool:
        """Apply extracted text to the draft if `document` is still the current upload.

        Returns False when the result is stale (the document was replaced or
        removed while extraction ran, or the application was finalized) or
        failed; nothing is applied then. Prefilled values never overwrite a
        field the applicant already typed.
        """
        if self._step is ApplicationStep.FINALIZED:
            Log.debug(f"Ignoring extraction for '{document.field_tag}' after finalize")
            return False
        current = self._draft.documents.get(document.field_tag)
        if current is not document:
            Log.debug(f"Ignoring stale extraction for '{document.field_tag}'")
            return False
        if not result.ok:
            return False
        self._draft.ocr_text[document.field_tag] = result.text
        for name, value in prefill_fields(
            document.field_tag, result.text, today=self._clock().date()
        ).items():
            if not self._draft.field_value(name):
                self._draft.fields[name] = value
        return True

    # Transitions

    def advance(self) -> StepResult:
        self._ensure_open()
        errors = self.errors_for(self._step)
        if errors:
            Log.debug(f"Step '{self._step.label}' rejected: {sorted(errors)}")
            return StepResult(advanced=False, step=self._step, errors=MappingProxyType(errors))

        self._passed.add(self._step)
        if self._step is ApplicationStep.DOCUMENT_UPLOAD:
            return self._finalize()

        self._step = ApplicationStep(self._step + 1)
        Log.debug(f"Advanced to step '{self._step.label}'")
        return StepResult(advanced=True, step=self._step)

    def go_back(self) -> ApplicationStep:
        """Return to the previous step; data entered in later steps is kept."""
        self._ensure_open()
        if self._step is not ApplicationStep.TYPE_SELECTION:
            self._step = ApplicationStep(self._step - 1)
        return self._step

    def _finalize(self) -> StepResult:
        # Earlier answers may have been edited after their step was passed.
        for step in STEP_GUARDS:
            errors = self.errors_for(step)
            if not errors and step not in self._passed:
                errors = {"step": f"Step '{step.label}' has not been completed"}
            if errors:
                Log.debug(f"Finalize rejected by step '{step.label}': {sorted(errors)}")
                return StepResult(
                    advanced=False, step=self._step, errors=MappingProxyType(errors)
                )

        self._finalized = FinalizedApplication.from_draft(
            self._draft,
            application_id=self._id_factory(),
            submitted_at=self._clock(),
        )
        self._step = ApplicationStep.FINALIZED
        Log.info(f"Application {self._finalized.id} finalized")
        return StepResult(advanced=True, step=self._step)

    def _ensure_open(self) -> None:
        if self._step is ApplicationStep.FINALIZED:
            raise StepMachineError("Application is already finalized")
