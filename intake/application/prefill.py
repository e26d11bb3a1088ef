"""Field suggestions pulled from OCR text of the ID and the academic certificates."""

import re
from datetime import date, datetime

from intake.application.models import GRADES_TAG, ID_TAG, REGISTRATION_TAG

_GWA_PATTERN = re.compile(
    r"(?:\bGWA\b|general\s+weighted\s+average)\s*[:=\-]?\s*([1-5](?:\.\d{1,4})?)",
    re.IGNORECASE,
)
_LABELLED_LINE = r"^\s*{label}\s*[:\-]\s*(?P<value>.+?)\s*$"


def _labelled(label: str) -> re.Pattern[str]:
    return re.compile(_LABELLED_LINE.format(label=label), re.IGNORECASE | re.MULTILINE)


_SCHOOL_PATTERN = _labelled(r"(?:school|university|college|institution)")
_COURSE_PATTERN = _labelled(r"(?:course|program|degree|strand)")
_NAME_PATTERN = _labelled(r"(?:student\s+name|name\s+of\s+student|full\s+name|name)")
_ADDRESS_PATTERN = _labelled(r"(?:residential\s+address|home\s+address|address)")
_AGE_PATTERN = _labelled(r"age")
_BIRTH_DATE_PATTERN = _labelled(r"(?:date\s+of\s+birth|birth\s*date|DOB)")
_YEAR_LEVEL_PATTERN = _labelled(r"(?:year\s+level|grade\s+level|year)")

_PATTERNS_BY_TAG: dict[str, dict[str, re.Pattern[str]]] = {
    ID_TAG: {
        "full_name": _NAME_PATTERN,
        "address": _ADDRESS_PATTERN,
        "course": _COURSE_PATTERN,
    },
    GRADES_TAG: {
        "gwa": _GWA_PATTERN,
        "school": _SCHOOL_PATTERN,
        "course": _COURSE_PATTERN,
        "full_name": _NAME_PATTERN,
    },
    REGISTRATION_TAG: {
        "school": _SCHOOL_PATTERN,
        "course": _COURSE_PATTERN,
        "full_name": _NAME_PATTERN,
    },
}

# Month-first is the common order on Philippine IDs.
_BIRTH_DATE_FORMATS = ("%m/%d/%Y", "%Y-%m-%d", "%d-%m-%Y", "%B %d, %Y", "%b %d, %Y")
_MAX_AGE = 120

_GRADE_LEVEL = re.compile(r"^(?:grade|g)\s*(11|12)$", re.IGNORECASE)
_COLLEGE_YEAR = re.compile(r"^([1-4])(?:st|nd|rd|th)?(?:\s+year)?$", re.IGNORECASE)


def age_from_birth_date(raw: str, today: date) -> str | None:
    """Whole years between `raw` and `today`, or None if unparseable or out of range."""
    for fmt in _BIRTH_DATE_FORMATS:
        try:
            born = datetime.strptime(raw.strip(), fmt).date()
            break
        except ValueError:
            continue
    else:
        return None
    age = today.year - born.year - ((today.month, today.day) < (born.month, born.day))
    if not 0 <= age <= _MAX_AGE:
        return None
    return str(age)


def normalize_year_level(raw: str) -> str | None:
    """Map 'Grade 11', '2nd Year' and similar to the form's year level codes."""
    value = raw.strip()
    if match := _GRADE_LEVEL.match(value):
        return f"G{match.group(1)}"
    if match := _COLLEGE_YEAR.match(value):
        return match.group(1)
    return None


def _id_extras(text: str, today: date) -> dict[str, str]:
    extras: dict[str, str] = {}
    age = _first_value(_AGE_PATTERN, text)
    if age is not None and age.isdigit() and int(age) <= _MAX_AGE:
        extras["age"] = age
    else:
        born = _first_value(_BIRTH_DATE_PATTERN, text)
        derived = age_from_birth_date(born, today) if born else None
        if derived is not None:
            extras["age"] = derived
    year = _first_value(_YEAR_LEVEL_PATTERN, text)
    level = normalize_year_level(year) if year else None
    if level is not None:
        extras["year_level"] = level
    return extras


def _first_value(pattern: re.Pattern[str], text: str) -> str | None:
    match = pattern.search(text)
    if match is None:
        return None
    value = (match.groupdict().get("value") or match.group(1)).strip()
    return value or None


def prefill_fields(field_tag: str, text: str, today: date | None = None) -> dict[str, str]:
    """Return the form fields that could be recognized in a document's text.

    Only the first match of each field is used; documents whose tag carries
    no structured fields yield an empty mapping. For the ID, an explicit age
    wins over one derived from the date of birth as of `today`.
    """
    patterns = _PATTERNS_BY_TAG.get(field_tag)
    if not patterns or not text.strip():
        return {}
    suggestions: dict[str, str] = {}
    for name, pattern in patterns.items():
        value = _first_value(pattern, text)
        if value is not None:
            suggestions[name] = value
    if field_tag == ID_TAG:
        suggestions.update(_id_extras(text, today or date.today()))
    return suggestions
