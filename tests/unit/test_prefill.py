from datetime import date

import pytest

from intake.application.prefill import (
    age_from_birth_date,
    normalize_year_level,
    prefill_fields,
)

GRADES_TEXT = """
REPUBLIC OF THE PHILIPPINES
Student Name: Juan Dela Cruz
School: Mapua University
Course: BS Computer Science
General Weighted Average: 1.75
"""

REGISTRATION_TEXT = """
CERTIFICATE OF REGISTRATION
Name - Maria Santos
University: University of the Philippines
Program: BS Biology
GWA 2.0
"""

ID_TEXT = """
STUDENT IDENTIFICATION CARD
Full Name: Ana Reyes
Date of Birth: 03/15/2006
Residential Address: 45 Mabini Ave, Manila
Strand: STEM
Year Level: Grade 12
"""

TODAY = date(2025, 6, 1)


class TestPrefillFields:
    def test_reads_all_fields_from_grades(self) -> None:
        assert prefill_fields("certificate-of-grades", GRADES_TEXT) == {
            "full_name": "Juan Dela Cruz",
            "school": "Mapua University",
            "course": "BS Computer Science",
            "gwa": "1.75",
        }

    def test_registration_never_suggests_gwa(self) -> None:
        assert prefill_fields("certificate-of-registration", REGISTRATION_TEXT) == {
            "full_name": "Maria Santos",
            "school": "University of the Philippines",
            "course": "BS Biology",
        }

    def test_short_gwa_label(self) -> None:
        assert prefill_fields("certificate-of-grades", "GWA: 1.25")["gwa"] == "1.25"

    def test_face_scan_yields_nothing(self) -> None:
        assert prefill_fields("face-scan", ID_TEXT) == {}

    def test_blank_text_yields_nothing(self) -> None:
        assert prefill_fields("certificate-of-grades", "   \n ") == {}

    def test_unlabelled_text_yields_nothing(self) -> None:
        assert prefill_fields("certificate-of-grades", "lorem ipsum dolor sit amet") == {}


class TestIdPrefill:
    def test_reads_labelled_name_address_and_age(self) -> None:
        text = "Name: Juan Dela Cruz\nAddress: 123 Main St\nAge: 20"

        assert prefill_fields("id", text, today=TODAY) == {
            "full_name": "Juan Dela Cruz",
            "address": "123 Main St",
            "age": "20",
        }

    def test_derives_age_and_year_level(self) -> None:
        assert prefill_fields("id", ID_TEXT, today=TODAY) == {
            "full_name": "Ana Reyes",
            "address": "45 Mabini Ave, Manila",
            "course": "STEM",
            "age": "19",
            "year_level": "G12",
        }

    def test_explicit_age_wins_over_birth_date(self) -> None:
        text = "Age: 21\nDate of Birth: 03/15/2006"

        assert prefill_fields("id", text, today=TODAY)["age"] == "21"

    def test_unreadable_birth_date_gives_no_age(self) -> None:
        suggestions = prefill_fields("id", "Name: Ana Reyes\nDOB: sometime in spring", today=TODAY)

        assert "age" not in suggestions
        assert suggestions["full_name"] == "Ana Reyes"


class TestAgeFromBirthDate:
    @pytest.mark.parametrize(
        "raw",
        ["06/02/2005", "2005-06-02", "02-06-2005", "June 2, 2005"],
    )
    def test_supported_formats(self, raw: str) -> None:
        assert age_from_birth_date(raw, TODAY) == "19"

    def test_birthday_today_counts(self) -> None:
        assert age_from_birth_date("06/01/2005", TODAY) == "20"

    def test_future_date_is_rejected(self) -> None:
        assert age_from_birth_date("01/01/2030", TODAY) is None

    def test_implausibly_old_is_rejected(self) -> None:
        assert age_from_birth_date("01/01/1850", TODAY) is None

    def test_garbage_is_rejected(self) -> None:
        assert age_from_birth_date("13/45/2005", TODAY) is None


class TestNormalizeYearLevel:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Grade 11", "G11"),
            ("G12", "G12"),
            ("1st Year", "1"),
            ("3rd", "3"),
            ("4", "4"),
            ("5th Year", None),
            ("Freshman", None),
        ],
    )
    def test_maps_to_form_codes(self, raw: str, expected: str | None) -> None:
        assert normalize_year_level(raw) == expected
