import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Sequence

from ..constants import (
    DEFAULT_CREDIT_HOURS,
    DEFAULT_SUBJECT_LEVEL,
    MAX_KEY_LENGTH,
    MAX_NAME_LENGTH,
    MAX_PHONE_LENGTH,
    MIN_COURSE_CODE_LENGTH,
    MIN_IDENTITY_LENGTH,
    TRAINEE_NAME_PREFIX,
)
from .cells import cell_at, cell_text, clean_text, is_missing
from .header_detector import HeaderDetection
from .keywords import COURSE_CODE, COURSE_NAME, IDENTITY, MAJOR, PHONE, TRAINEE_NAME

logger = logging.getLogger(__name__)

_NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9]")


@dataclass
class ExtractionResult:
    """Subject and trainee drafts collected from one roster, keyed by natural key."""

    subjects: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    trainees: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    header_row: int = -1
    rows_read: int = 0
    rows_skipped: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.trainees

    def summary(self) -> Dict[str, int]:
        return {
            "header_row": self.header_row,
            "rows_read": self.rows_read,
            "rows_skipped": self.rows_skipped,
            "subjects": len(self.subjects),
            "trainees": len(self.trainees),
        }


def sanitize_identity(value: Any) -> str:
    """Keep only ASCII letters and digits of an identity cell."""
    return _NON_ALPHANUMERIC.sub("", cell_text(value))


def _optional_text(row: Sequence[Any], detection: HeaderDetection, role: str, max_length: int) -> str:
    if not detection.has(role):
        return ""
    return clean_text(cell_at(row, detection.index_of(role)), max_length=max_length)


def new_trainee_draft(identity: str, full_name: str, phone: str = "", major: str = "") -> Dict[str, Any]:
    return {
        "full_name": full_name,
        "national_id": identity,
        "trainee_number": identity,
        "phone_number": phone,
        "major": major,
        "gpa": "",
        "completed_hours": 0,
        "remaining_hours": 0,
        "passed_subject_codes": set(),
        "failed_subject_codes": set(),
    }


def new_subject_draft(code: str, name: str) -> Dict[str, Any]:
    return {
        "name": name,
        "code": code,
        "level": DEFAULT_SUBJECT_LEVEL,
        "credit_hours": DEFAULT_CREDIT_HOURS,
    }


def extract_rows(rows: Sequence[Sequence[Any]], detection: HeaderDetection) -> ExtractionResult:
    """
    Walk every row below the detected header and group it by trainee.

    Rows without a usable identity or course code are skipped, not reported
    as errors; rosters routinely carry totals, blank separators and footers.
    Keys too long for the record columns are skipped as well, while names,
    phone numbers and majors are clipped to fit.
    """
    result = ExtractionResult(header_row=detection.row_index)
    id_idx = detection.index_of(IDENTITY)
    code_idx = detection.index_of(COURSE_CODE)

    for row in list(rows or [])[detection.row_index + 1:]:
        result.rows_read += 1
        row = row or []

        raw_identity = cell_at(row, id_idx)
        if is_missing(raw_identity):
            result.rows_skipped += 1
            continue
        identity = sanitize_identity(raw_identity)
        if not MIN_IDENTITY_LENGTH <= len(identity) <= MAX_KEY_LENGTH:
            result.rows_skipped += 1
            continue

        course_code = clean_text(cell_at(row, code_idx))
        if not MIN_COURSE_CODE_LENGTH <= len(course_code) <= MAX_KEY_LENGTH:
            result.rows_skipped += 1
            continue

        course_name = _optional_text(row, detection, COURSE_NAME, MAX_NAME_LENGTH) or course_code

        trainee = result.trainees.get(identity)
        if trainee is None:
            full_name = _optional_text(row, detection, TRAINEE_NAME, MAX_NAME_LENGTH) or f"{TRAINEE_NAME_PREFIX}{identity}"
            trainee = new_trainee_draft(
                identity,
                full_name,
                phone=_optional_text(row, detection, PHONE, MAX_PHONE_LENGTH),
                major=_optional_text(row, detection, MAJOR, MAX_NAME_LENGTH),
            )
            result.trainees[identity] = trainee

        trainee["failed_subject_codes"].add(course_code)

        if course_code not in result.subjects:
            result.subjects[course_code] = new_subject_draft(course_code, course_name)

    logger.info(
        "Extracted %s trainees and %s subjects from %s rows (%s skipped).",
        len(result.trainees),
        len(result.subjects),
        result.rows_read,
        result.rows_skipped,
    )
    return result
