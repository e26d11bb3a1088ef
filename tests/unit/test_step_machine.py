from datetime import datetime, timezone

import pytest

from intake.application.exceptions import StepMachineError
from intake.application.models import ApplicationStep, ApplicationType
from intake.application.step_machine import StepMachine
from intake.extraction.models import ExtractionResult, UploadedDocument

SUBMITTED_AT = datetime(2025, 6, 1, 8, 30, tzinfo=timezone.utc)


def _machine() -> StepMachine:
    return StepMachine(clock=lambda: SUBMITTED_AT, id_factory=lambda: "app-1")


def _image(tag: str) -> UploadedDocument:
    return UploadedDocument(b"\x89PNG", f"{tag}.png", "image/png", tag)


def _pdf(tag: str) -> UploadedDocument:
    return UploadedDocument(b"%PDF-1.4", f"{tag}.pdf", "application/pdf", tag)


def _personal_fields() -> dict[str, str]:
    return {
        "full_name": "Juan Dela Cruz",
        "age": "19",
        "address": "123 Rizal St, Quezon City",
        "school": "Mapua University",
        "course": "BS Computer Science",
        "year_level": "2",
        "gwa": "1.75",
    }


def _advance_to(machine: StepMachine, target: ApplicationStep) -> None:
    """Fill each step with valid data and advance until `target` is reached."""
    while machine.step is not target:
        match machine.step:
            case ApplicationStep.TYPE_SELECTION:
                machine.select_type(ApplicationType.NEW)
            case ApplicationStep.ID_UPLOAD:
                machine.attach_document(_image("id"))
            case ApplicationStep.FACE_SCAN:
                machine.attach_document(_image("face-scan"))
            case ApplicationStep.PERSONAL_INFO:
                machine.update_fields(**_personal_fields())
            case ApplicationStep.DOCUMENT_UPLOAD:
                machine.attach_document(_pdf("certificate-of-grades"))
                machine.attach_document(_pdf("certificate-of-registration"))
        result = machine.advance()
        assert result.advanced, result.errors


class TestForwardTransitions:
    def test_starts_at_type_selection(self) -> None:
        assert _machine().step is ApplicationStep.TYPE_SELECTION

    def test_invalid_step_is_rejected_without_moving(self) -> None:
        machine = _machine()

        result = machine.advance()

        assert result.advanced is False
        assert result.step is ApplicationStep.TYPE_SELECTION
        assert "application_type" in result.errors
        assert machine.step is ApplicationStep.TYPE_SELECTION

    def test_rejection_is_idempotent(self) -> None:
        machine = _machine()
        machine.select_type(ApplicationType.NEW)
        machine.advance()

        first = machine.advance()
        second = machine.advance()

        assert first == second
        assert machine.step is ApplicationStep.ID_UPLOAD

    def test_walks_every_step_in_order(self) -> None:
        machine = _machine()
        visited = [machine.step]
        _advance_to(machine, ApplicationStep.ID_UPLOAD)
        visited.append(machine.step)
        _advance_to(machine, ApplicationStep.FACE_SCAN)
        visited.append(machine.step)
        _advance_to(machine, ApplicationStep.FINALIZED)
        visited.append(machine.step)

        assert visited == [
            ApplicationStep.TYPE_SELECTION,
            ApplicationStep.ID_UPLOAD,
            ApplicationStep.FACE_SCAN,
            ApplicationStep.FINALIZED,
        ]

    def test_pdf_face_scan_blocks_advance(self) -> None:
        machine = _machine()
        _advance_to(machine, ApplicationStep.FACE_SCAN)
        machine.attach_document(_pdf("face-scan"))

        result = machine.advance()

        assert result.errors == {"face-scan": "Face scan must be an image"}

    def test_step_labels(self) -> None:
        assert [step.label for step in ApplicationStep][:5] == [
            "Application Type",
            "Upload ID",
            "Face Scan",
            "Personal Info",
            "Upload Documents",
        ]


class TestGoBack:
    def test_go_back_keeps_later_data(self) -> None:
        machine = _machine()
        _advance_to(machine, ApplicationStep.DOCUMENT_UPLOAD)

        assert machine.go_back() is ApplicationStep.PERSONAL_INFO
        assert machine.draft.field_value("full_name") == "Juan Dela Cruz"
        assert "id" in machine.draft.documents

    def test_go_back_from_first_step_stays(self) -> None:
        machine = _machine()
        assert machine.go_back() is ApplicationStep.TYPE_SELECTION

    def test_corrected_value_wins(self) -> None:
        machine = _machine()
        _advance_to(machine, ApplicationStep.DOCUMENT_UPLOAD)
        machine.go_back()
        machine.update_fields(full_name="Juan P. Dela Cruz")
        machine.advance()

        _advance_to(machine, ApplicationStep.FINALIZED)

        assert machine.finalized is not None
        assert machine.finalized.fields["full_name"] == "Juan P. Dela Cruz"

    def test_invalidated_earlier_step_blocks_finalize(self) -> None:
        machine = _machine()
        _advance_to(machine, ApplicationStep.PERSONAL_INFO)
        machine.remove_document("id")
        _advance_to(machine, ApplicationStep.DOCUMENT_UPLOAD)
        machine.attach_document(_pdf("certificate-of-grades"))
        machine.attach_document(_pdf("certificate-of-registration"))

        result = machine.advance()

        assert result.advanced is False
        assert result.errors == {"id": "ID document is required"}
        assert machine.step is ApplicationStep.DOCUMENT_UPLOAD
        assert machine.finalized is None


class TestFinalize:
    def test_snapshot_contains_draft(self) -> None:
        machine = _machine()
        _advance_to(machine, ApplicationStep.FINALIZED)

        finalized = machine.finalized
        assert finalized is not None
        assert finalized.id == "app-1"
        assert finalized.application_type is ApplicationType.NEW
        assert finalized.submitted_at == SUBMITTED_AT
        assert [d.field_tag for d in finalized.documents] == [
            "certificate-of-grades",
            "certificate-of-registration",
            "face-scan",
            "id",
        ]
        assert finalized.document("id") is machine.draft.documents["id"]
        assert finalized.details_payload()["gwa"] == "1.75"

    def test_snapshot_is_detached_from_draft(self) -> None:
        machine = _machine()
        _advance_to(machine, ApplicationStep.FINALIZED)
        finalized = machine.finalized
        assert finalized is not None

        machine.draft.fields["full_name"] = "Someone Else"

        assert finalized.fields["full_name"] == "Juan Dela Cruz"
        with pytest.raises(TypeError):
            finalized.fields["full_name"] = "x"  # type: ignore[index]

    def test_finalized_machine_rejects_changes(self) -> None:
        machine = _machine()
        _advance_to(machine, ApplicationStep.FINALIZED)

        with pytest.raises(StepMachineError, match="already finalized"):
            machine.advance()
        with pytest.raises(StepMachineError):
            machine.update_fields(full_name="Late Edit")
        with pytest.raises(StepMachineError):
            machine.go_back()


class TestRecordExtraction:
    def test_stores_text_and_prefills_empty_fields(self) -> None:
        machine = _machine()
        grades = _pdf("certificate-of-grades")
        machine.attach_document(grades)
        machine.update_fields(school="Typed School")

        applied = machine.record_extraction(
            grades, ExtractionResult(text="School: Mapua University\nGWA: 1.50")
        )

        assert applied is True
        assert machine.draft.ocr_text["certificate-of-grades"].startswith("School:")
        assert machine.draft.field_value("gwa") == "1.50"
        assert machine.draft.field_value("school") == "Typed School"

    def test_stale_result_is_ignored(self) -> None:
        machine = _machine()
        first = _pdf("certificate-of-grades")
        replacement = UploadedDocument(
            b"%PDF-1.7", "new.pdf", "application/pdf", "certificate-of-grades"
        )
        machine.attach_document(first)
        machine.attach_document(replacement)

        applied = machine.record_extraction(first, ExtractionResult(text="GWA: 1.25"))

        assert applied is False
        assert "certificate-of-grades" not in machine.draft.ocr_text
        assert machine.draft.field_value("gwa") == ""

    def test_result_for_removed_document_is_ignored(self) -> None:
        machine = _machine()
        grades = _pdf("certificate-of-grades")
        machine.attach_document(grades)
        machine.remove_document("certificate-of-grades")

        assert machine.record_extraction(grades, ExtractionResult(text="x")) is False

    def test_failed_result_is_not_applied(self) -> None:
        machine = _machine()
        grades = _pdf("certificate-of-grades")
        machine.attach_document(grades)

        applied = machine.record_extraction(grades, ExtractionResult(error="Failed to process PDF"))

        assert applied is False
        assert machine.draft.ocr_text == {}

    def test_replacing_document_drops_its_ocr_text(self) -> None:
        machine = _machine()
        grades = _pdf("certificate-of-grades")
        machine.attach_document(grades)
        machine.record_extraction(grades, ExtractionResult(text="GWA: 1.25"))

        machine.attach_document(_pdf("certificate-of-grades"))

        assert "certificate-of-grades" not in machine.draft.ocr_text

    def test_late_result_after_finalize_is_ignored(self) -> None:
        machine = _machine()
        _advance_to(machine, ApplicationStep.FINALIZED)
        id_doc = machine.draft.documents["id"]

        applied = machine.record_extraction(id_doc, ExtractionResult(text="Name: Late Arrival"))

        assert applied is False
        assert "id" not in machine.draft.ocr_text
        assert machine.finalized is not None
        assert machine.finalized.ocr_text.get("id") is None
