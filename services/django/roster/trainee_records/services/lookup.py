import logging
from typing import Any, Dict, Iterable, List, Optional

from ..stores import RecordStore

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("full_name", "national_id", "trainee_number", "phone_number")


def remaining_subjects(trainee: Dict[str, Any], subjects: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    # Older records may hold course codes instead of subject ids.
    outstanding = set(trainee.get("failed_subject_ids") or [])
    matched = [s for s in subjects if s.get("id") in outstanding or s.get("code") in outstanding]
    return sorted(matched, key=lambda s: (s.get("level") or 0, s.get("code") or ""))


def lookup_trainee(store: RecordStore, key: str) -> Optional[Dict[str, Any]]:
    """
    Find a trainee by trainee number or national id and list the courses
    still outstanding, ordered by level. Returns None when nobody matches.
    """
    key = str(key or "").strip()
    if not key:
        return None

    trainee = store.find_trainee(key)
    if trainee is None:
        logger.debug("No trainee matches lookup key %r.", key)
        return None

    return {
        "trainee": trainee,
        "remaining_subjects": remaining_subjects(trainee, store.list_subjects()),
    }


def filter_trainees(trainees: Iterable[Dict[str, Any]], term: str) -> List[Dict[str, Any]]:
    term = str(term or "").strip().lower()
    trainees = list(trainees)
    if not term:
        return trainees
    return [
        trainee for trainee in trainees
        if any(term in str(trainee.get(name) or "").lower() for name in SEARCH_FIELDS)
    ]


def clear_records(store: RecordStore) -> Dict[str, int]:
    """Delete every subject and trainee from the store."""
    counts = store.clear()
    logger.warning("Cleared %s: %s", store.identity, counts)
    return counts
