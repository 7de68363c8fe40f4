import logging
from typing import Any, Dict, Optional

from ..stores import RecordStore, get_record_store
from ..utils.keywords import HeaderKeywords
from ..utils.roster_reader import parse_roster_file
from .reconciliation import reconcile_import

logger = logging.getLogger(__name__)


def ingest_roster_result(
    result: Dict[str, Any],
    *,
    file_name: str,
    store: Optional[RecordStore] = None,
    batch_size: Optional[int] = None,
) -> Optional[Dict[str, Any]]:
    """
    Persist a parsed roster into the record store.

    Returns the reconciliation summary that is merged back into the API
    response, or None when the parse did not succeed. Store failures
    propagate to the caller.
    """
    if not result or result.get("status") != "ok":
        return None

    store = store or get_record_store()
    summary = reconcile_import(result.get("extraction"), store, batch_size=batch_size)
    summary["file"] = file_name or result.get("file", "uploaded_file")
    summary["store"] = store.backend_name

    logger.info(
        "Imported %s into %s: %s created, %s updated.",
        summary["file"],
        store.identity,
        summary["trainees_created"],
        summary["trainees_updated"],
    )
    return summary


def response_payload(result: Dict[str, Any], summary: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """JSON-safe view of a parse result, optionally with its import summary."""
    payload = {key: value for key, value in result.items() if key != "extraction"}
    if summary is not None:
        payload["import"] = summary
        payload["records_created"] = summary["trainees_created"]
        payload["records_updated"] = summary["trainees_updated"]
    return payload


def import_roster_file(
    file,
    *,
    store: Optional[RecordStore] = None,
    keywords: Optional[HeaderKeywords] = None,
    batch_size: Optional[int] = None,
) -> Dict[str, Any]:
    """Parse and import one roster; the returned payload is JSON-safe."""
    result = parse_roster_file(file, keywords=keywords)
    summary = ingest_roster_result(
        result,
        file_name=result.get("file", ""),
        store=store,
        batch_size=batch_size,
    )
    return response_payload(result, summary)
