import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..conf import get_setting
from ..constants import NATURAL_KEY_FIELDS, SUBJECTS, TRAINEES
from ..exceptions import BatchCommitFailed, RecordStoreError
from ..stores import CREATE, UPDATE, RecordStore, WriteOperation, store_lock
from ..utils.row_extractor import ExtractionResult

logger = logging.getLogger(__name__)


@dataclass
class ImportPlan:
    subject_operations: List[WriteOperation] = field(default_factory=list)
    trainee_operations: List[WriteOperation] = field(default_factory=list)
    subjects_existing: int = 0
    trainees_created: int = 0
    trainees_updated: int = 0
    unresolved_codes: List[str] = field(default_factory=list)


def _base_summary(extraction: Optional[ExtractionResult]) -> Dict[str, Any]:
    return {
        "subjects_created": 0,
        "subjects_existing": 0,
        "trainees_created": 0,
        "trainees_updated": 0,
        "unresolved_codes": [],
        "batches_committed": 0,
        "batches_total": 0,
        "trainees_in_file": len(extraction.trainees) if extraction else 0,
        "consistent": True,
    }


def _resolve_batch_size(batch_size: Optional[int]) -> int:
    size = batch_size if batch_size is not None else get_setting("IMPORT_BATCH_SIZE")
    try:
        size = int(size)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid import batch size: {size!r}")
    if size < 1:
        raise ValueError("Import batch size must be at least 1.")
    return size


def chunked(operations: Sequence[WriteOperation], size: int) -> List[List[WriteOperation]]:
    return [list(operations[start:start + size]) for start in range(0, len(operations), size)]


def build_trainee_index(trainees: Iterable[Dict[str, Any]]) -> Dict[str, Dict[str, str]]:
    """Map each natural-key field to {value: trainee id}; the first record wins."""
    index: Dict[str, Dict[str, str]] = {name: {} for name in NATURAL_KEY_FIELDS}
    for record in trainees:
        for name in NATURAL_KEY_FIELDS:
            value = str(record.get(name) or "").strip()
            if value:
                index[name].setdefault(value, record["id"])
    return index


def match_trainee(draft: Dict[str, Any], index: Dict[str, Dict[str, str]]) -> Optional[str]:
    for name in NATURAL_KEY_FIELDS:
        value = str(draft.get(name) or "").strip()
        if value and value in index[name]:
            return index[name][value]
    return None


def resolve_codes(codes: Iterable[str], code_to_id: Dict[str, str]) -> Tuple[List[str], List[str]]:
    """Translate course codes to subject ids; codes without a subject are returned separately."""
    resolved: List[str] = []
    unresolved: List[str] = []
    for code in sorted(codes or ()):
        subject_id = code_to_id.get(code)
        if subject_id is None:
            unresolved.append(code)
        elif subject_id not in resolved:
            resolved.append(subject_id)
    return resolved, unresolved


def _trainee_payload(draft: Dict[str, Any], failed_ids: List[str], passed_ids: List[str]) -> Dict[str, Any]:
    payload = {
        key: value for key, value in draft.items()
        if key not in ("failed_subject_codes", "passed_subject_codes")
    }
    payload["failed_subject_ids"] = failed_ids
    payload["passed_subject_ids"] = passed_ids
    return payload


def _update_payload(draft: Dict[str, Any], failed_ids: List[str], passed_ids: List[str]) -> Dict[str, Any]:
    payload = {
        "full_name": draft.get("full_name", ""),
        "failed_subject_ids": failed_ids,
        "passed_subject_ids": passed_ids,
    }
    # A roster without phone/major columns must not blank out stored values.
    for key in ("phone_number", "major"):
        if draft.get(key):
            payload[key] = draft[key]
    return payload


def plan_import(
    extraction: ExtractionResult,
    subjects: Iterable[Dict[str, Any]],
    trainees: Iterable[Dict[str, Any]],
    store: RecordStore,
) -> ImportPlan:
    """Decide every create/update against one snapshot of the store."""
    plan = ImportPlan()

    code_to_id = {s["code"]: s["id"] for s in subjects if s.get("code")}
    for code, draft in extraction.subjects.items():
        if code in code_to_id:
            plan.subjects_existing += 1
            continue
        subject_id = store.new_id(SUBJECTS)
        plan.subject_operations.append(WriteOperation(CREATE, SUBJECTS, subject_id, dict(draft)))
        code_to_id[code] = subject_id

    index = build_trainee_index(trainees)
    unresolved = set()
    for draft in extraction.trainees.values():
        failed_ids, missing_failed = resolve_codes(draft.get("failed_subject_codes"), code_to_id)
        passed_ids, missing_passed = resolve_codes(draft.get("passed_subject_codes"), code_to_id)
        unresolved.update(missing_failed, missing_passed)

        existing_id = match_trainee(draft, index)
        if existing_id:
            plan.trainee_operations.append(
                WriteOperation(UPDATE, TRAINEES, existing_id, _update_payload(draft, failed_ids, passed_ids))
            )
            plan.trainees_updated += 1
            continue

        trainee_id = store.new_id(TRAINEES)
        plan.trainee_operations.append(
            WriteOperation(CREATE, TRAINEES, trainee_id, _trainee_payload(draft, failed_ids, passed_ids))
        )
        plan.trainees_created += 1
        for name in NATURAL_KEY_FIELDS:
            value = str(draft.get(name) or "").strip()
            if value:
                index[name].setdefault(value, trainee_id)

    if unresolved:
        logger.warning("Dropped %s course codes with no subject: %s", len(unresolved), sorted(unresolved))
    plan.unresolved_codes = sorted(unresolved)
    return plan


def _commit(plan: ImportPlan, store: RecordStore, batch_size: int, summary: Dict[str, Any]) -> None:
    batches = [(SUBJECTS, batch) for batch in chunked(plan.subject_operations, batch_size)]
    batches += [(TRAINEES, batch) for batch in chunked(plan.trainee_operations, batch_size)]
    summary["batches_total"] = len(batches)

    committed = {SUBJECTS: 0, TRAINEES: 0}
    totals = {SUBJECTS: len(plan.subject_operations), TRAINEES: len(plan.trainee_operations)}

    for number, (phase, batch) in enumerate(batches, start=1):
        try:
            store.commit_batch(batch)
        except RecordStoreError as exc:
            if summary["batches_committed"] == 0:
                logger.error("Import aborted before any write landed: %s", exc)
                raise
            logger.error(
                "Batch %s/%s (%s) failed after %s committed batches: %s",
                number,
                len(batches),
                phase,
                summary["batches_committed"],
                exc,
            )
            raise BatchCommitFailed(
                phase=phase,
                batches_committed=summary["batches_committed"],
                batches_total=len(batches),
                subjects_committed=committed[SUBJECTS],
                trainees_committed=committed[TRAINEES],
                subjects_pending=totals[SUBJECTS] - committed[SUBJECTS],
                trainees_pending=totals[TRAINEES] - committed[TRAINEES],
            ) from exc
        committed[phase] += len(batch)
        summary["batches_committed"] += 1
        logger.debug("Committed %s batch %s/%s (%s operations).", phase, number, len(batches), len(batch))


def reconcile_import(
    extraction: Optional[ExtractionResult],
    store: RecordStore,
    *,
    batch_size: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Merge extracted drafts into ``store``.

    Subjects are matched by code and trainees by natural key; unmatched
    records are created, matched trainees have their course lists replaced.
    Subject batches are committed before trainee batches so every stored
    course id resolves. Returns a summary dict; raises the store error when
    nothing was committed and ``BatchCommitFailed`` when only part was.
    """
    summary = _base_summary(extraction)
    if extraction is None or extraction.is_empty:
        return summary

    batch_size = _resolve_batch_size(batch_size)

    with store_lock(store):
        subjects = store.list_subjects()
        trainees = store.list_trainees()
        plan = plan_import(extraction, subjects, trainees, store)
        _commit(plan, store, batch_size, summary)

    summary.update(
        subjects_created=len(plan.subject_operations),
        subjects_existing=plan.subjects_existing,
        trainees_created=plan.trainees_created,
        trainees_updated=plan.trainees_updated,
        unresolved_codes=plan.unresolved_codes,
    )
    logger.info(
        "Import into %s: %s subjects created, %s trainees created, %s updated in %s batches.",
        store.identity,
        summary["subjects_created"],
        summary["trainees_created"],
        summary["trainees_updated"],
        summary["batches_committed"],
    )
    return summary
