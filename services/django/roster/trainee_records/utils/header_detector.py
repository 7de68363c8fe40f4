# trainee_records/utils/header_detector.py

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..constants import HEADER_SCAN_ROWS
from ..exceptions import RequiredColumnsMissing, SchemaNotDetected
from .cells import cell_text
from .keywords import (
    COURSE_CODE,
    IDENTITY,
    OPTIONAL_ROLES,
    REQUIRED_ROLES,
    HeaderKeywords,
)

logger = logging.getLogger(__name__)

ABSENT = -1


@dataclass
class HeaderDetection:
    row_index: int
    score: int
    columns: Dict[str, int] = field(default_factory=dict)
    roles: Dict[str, int] = field(default_factory=dict)

    def index_of(self, role: str) -> int:
        return self.roles.get(role, ABSENT)

    def has(self, role: str) -> bool:
        return self.index_of(role) != ABSENT


def normalize_header_cell(value: Any) -> str:
    return cell_text(value).strip().lower()


def score_row(cells: Sequence[str], keywords: HeaderKeywords) -> int:
    """Count the required keyword groups matched by at least one cell."""
    return sum(
        1 for role in REQUIRED_ROLES
        if any(keywords.matches(role, cell) for cell in cells)
    )


def build_column_map(cells: Sequence[str]) -> Dict[str, int]:
    # A repeated label keeps its first position but points at its last column.
    columns: Dict[str, int] = {}
    for idx, cell in enumerate(cells):
        columns[cell] = idx
    return columns


def find_column(columns: Dict[str, int], keywords: HeaderKeywords, role: str) -> int:
    for label, idx in columns.items():
        if keywords.matches(role, label):
            return idx
    return ABSENT


def detect_header(
    rows: Sequence[Sequence[Any]],
    keywords: Optional[HeaderKeywords] = None,
    *,
    max_scan_rows: int = HEADER_SCAN_ROWS,
) -> HeaderDetection:
    """
    Locate the header row of a roster and resolve its column roles.

    Only the first ``max_scan_rows`` rows are scored. A row scores one point
    for each required group (identity, course code) that one of its cells
    matches; the earliest row with the highest score wins.
    """
    keywords = keywords or HeaderKeywords()

    best_index = ABSENT
    best_score = 0
    best_cells: List[str] = []

    for idx, row in enumerate(list(rows or [])[:max_scan_rows]):
        cells = [normalize_header_cell(cell) for cell in (row or [])]
        score = score_row(cells, keywords)
        if score > best_score:
            best_index, best_score, best_cells = idx, score, cells

    if best_score < 1:
        raise SchemaNotDetected(rows_scanned=min(len(rows or []), max_scan_rows))

    columns = build_column_map(best_cells)
    roles = {
        role: find_column(columns, keywords, role)
        for role in REQUIRED_ROLES + OPTIONAL_ROLES
    }

    missing = [role for role in (IDENTITY, COURSE_CODE) if roles[role] == ABSENT]
    if missing:
        raise RequiredColumnsMissing(header_row=best_index, missing=missing)

    logger.debug(
        "Header detected at row %s (score=%s): %s",
        best_index,
        best_score,
        {role: idx for role, idx in roles.items() if idx != ABSENT},
    )
    return HeaderDetection(row_index=best_index, score=best_score, columns=columns, roles=roles)
