# trainee_records/utils/roster_reader.py

import csv
import io
import logging
import zipfile
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
import xlrd

from ..conf import get_setting
from ..exceptions import (
    EmptyExtraction,
    RequiredColumnsMissing,
    RosterImportError,
    SchemaNotDetected,
    UnreadableRoster,
)
from .header_detector import detect_header
from .keywords import HeaderKeywords
from .row_extractor import extract_rows

logger = logging.getLogger(__name__)

XLSX_MAGIC = b"PK\x03\x04"
XLS_MAGIC = b"\xd0\xcf\x11\xe0"
TEXT_DELIMITERS = ",;\t|"
SNIFF_SAMPLE_SIZE = 8192


# --------------------------------------------------------------------------
# Raw input -> list of rows
# --------------------------------------------------------------------------

def _read_bytes(file) -> bytes:
    if isinstance(file, (bytes, bytearray)):
        return bytes(file)
    if isinstance(file, (str, Path)):
        return Path(file).read_bytes()
    if hasattr(file, "seek"):
        file.seek(0)
    content = file.read()
    if isinstance(content, str):
        return content.encode("utf-8")
    return content or b""


def excel_engine(content: bytes, filename: str = "") -> Optional[str]:
    """Pick the pandas engine for binary workbooks; None means delimited text."""
    if content.startswith(XLSX_MAGIC):
        return "openpyxl"
    if content.startswith(XLS_MAGIC) or filename.lower().endswith(".xls"):
        return "xlrd"
    return None


def _frame_to_rows(df: pd.DataFrame) -> List[List[Any]]:
    df = df.astype(object)
    return df.where(pd.notna(df), None).values.tolist()


def _read_workbook(content: bytes, engine: str) -> List[List[Any]]:
    try:
        df = pd.read_excel(io.BytesIO(content), sheet_name=0, header=None, dtype=object, engine=engine)
    except (ValueError, OSError, KeyError, zipfile.BadZipFile, xlrd.XLRDError) as exc:
        logger.warning("Could not open workbook with %s: %s", engine, exc)
        raise UnreadableRoster(reason=str(exc)) from exc
    return _frame_to_rows(df)


def _read_text(content: bytes, encoding: Optional[str]) -> List[List[str]]:
    try:
        text = content.decode(encoding or "utf-8-sig", errors="replace")
    except LookupError as exc:
        raise UnreadableRoster(reason=f"Unknown encoding: {encoding}") from exc

    sample = text[:SNIFF_SAMPLE_SIZE]
    try:
        delimiter = csv.Sniffer().sniff(sample, delimiters=TEXT_DELIMITERS).delimiter
    except csv.Error:
        delimiter = ","

    try:
        return [row for row in csv.reader(io.StringIO(text), delimiter=delimiter)]
    except csv.Error as exc:
        raise UnreadableRoster(reason=str(exc)) from exc


def read_roster_rows(content: bytes, *, filename: str = "", encoding: Optional[str] = None) -> List[List[Any]]:
    """
    Turn an uploaded roster into a list of rows (lists of cell values).

    Workbooks are read from their first sheet with no header handling at all,
    since the header row is located later. Everything else is treated as
    delimited text; ``encoding`` overrides the default UTF-8 decoding.
    """
    engine = None if encoding else excel_engine(content, filename)
    if engine:
        return _read_workbook(content, engine)
    return _read_text(content, encoding)


# --------------------------------------------------------------------------
# Main roster parser
# --------------------------------------------------------------------------

def _parse_rows(rows, keywords: HeaderKeywords):
    detection = detect_header(rows, keywords, max_scan_rows=int(get_setting("HEADER_SCAN_ROWS")))
    extraction = extract_rows(rows, detection)
    if extraction.is_empty:
        raise EmptyExtraction(header_row=detection.row_index, rows_read=extraction.rows_read)
    return extraction


def _error(filename: str, exc: RosterImportError) -> Dict[str, Any]:
    payload = exc.as_dict()
    payload["file"] = filename
    return payload


def parse_roster_file(file, *, keywords: Optional[HeaderKeywords] = None) -> Dict[str, Any]:
    """
    Read, detect and extract one roster.

    Returns a result envelope with ``status`` ``ok``, ``empty`` or ``error``.
    Text files whose headers cannot be recognised, or only partly, are
    decoded a second time with the fallback encoding (Windows Arabic by
    default) before giving up; the first error is the one reported.
    """
    filename = getattr(file, "name", None) or (str(file) if isinstance(file, (str, Path)) else "uploaded_file")
    keywords = keywords or HeaderKeywords()

    try:
        content = _read_bytes(file)
    except OSError as exc:
        logger.warning("Could not read roster %s: %s", filename, exc)
        return _error(filename, UnreadableRoster(reason=str(exc)))

    encoding = "utf-8"
    try:
        extraction = _parse_rows(read_roster_rows(content, filename=filename), keywords)
    except (SchemaNotDetected, RequiredColumnsMissing) as first_error:
        if excel_engine(content, filename):
            return _error(filename, first_error)
        encoding = get_setting("FALLBACK_TEXT_ENCODING")
        logger.info("No usable header in %s as UTF-8; retrying as %s.", filename, encoding)
        try:
            extraction = _parse_rows(read_roster_rows(content, filename=filename, encoding=encoding), keywords)
        except EmptyExtraction as exc:
            return _error(filename, exc)
        except RosterImportError:
            return _error(filename, first_error)
    except RosterImportError as exc:
        logger.info("Roster %s rejected: %s", filename, exc.code)
        return _error(filename, exc)

    return {
        "status": "ok",
        "file": filename,
        "encoding": encoding if not excel_engine(content, filename) else None,
        "header_row": extraction.header_row,
        "stats": extraction.summary(),
        "extraction": extraction,
    }
