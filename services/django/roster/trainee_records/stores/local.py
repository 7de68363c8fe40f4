import copy
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from ..constants import COLLECTIONS, SUBJECTS, TRAINEES
from ..exceptions import RecordNotFound, StoreUnavailable
from .base import CREATE, RecordStore, WriteOperation, clean_fields

logger = logging.getLogger(__name__)


def _empty_document() -> Dict[str, Dict[str, Dict[str, Any]]]:
    return {collection: {} for collection in COLLECTIONS}


class LocalRecordStore(RecordStore):
    """
    Single-machine store kept in a JSON document.

    Without a ``path`` the records live only in this process. Batches are
    applied to a copy of the document and swapped in after the file write
    succeeds, so a failed batch leaves both disk and memory untouched.
    """

    backend_name = "local"

    def __init__(self, path: Optional[str] = None, **_options):
        self.path = Path(path).expanduser() if path else None
        self._lock = threading.RLock()
        self._document: Optional[Dict[str, Dict[str, Dict[str, Any]]]] = None

    @property
    def identity(self) -> str:
        if self.path is None:
            return f"{self.backend_name}:memory:{id(self)}"
        return f"{self.backend_name}:{self.path.resolve()}"

    def _load(self) -> Dict[str, Dict[str, Dict[str, Any]]]:
        if self._document is not None:
            return self._document
        document = _empty_document()
        if self.path is not None and self.path.exists():
            try:
                raw = json.loads(self.path.read_text(encoding="utf-8") or "{}")
            except (OSError, ValueError) as exc:
                logger.error("Could not read local record store %s: %s", self.path, exc)
                raise StoreUnavailable(reason=str(exc), path=str(self.path)) from exc
            if not isinstance(raw, dict):
                raise StoreUnavailable(reason="Malformed store document.", path=str(self.path))
            for collection in COLLECTIONS:
                records = raw.get(collection) or {}
                if not isinstance(records, dict):
                    raise StoreUnavailable(reason=f"Malformed '{collection}' section.", path=str(self.path))
                document[collection] = records
        self._document = document
        return document

    def _persist(self, document) -> None:
        if self.path is None:
            return
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=str(self.path.parent), suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(document, handle, ensure_ascii=False)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as exc:
            logger.error("Could not write local record store %s: %s", self.path, exc)
            raise StoreUnavailable(reason=str(exc), path=str(self.path)) from exc
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

    def _records(self, collection: str) -> List[Dict[str, Any]]:
        with self._lock:
            records = self._load()[collection]
            return [{"id": record_id, **copy.deepcopy(data)} for record_id, data in records.items()]

    def list_subjects(self) -> List[Dict[str, Any]]:
        return self._records(SUBJECTS)

    def list_trainees(self) -> List[Dict[str, Any]]:
        return self._records(TRAINEES)

    def get_record(self, collection: str, record_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            data = self._load()[collection].get(record_id)
            return {"id": record_id, **copy.deepcopy(data)} if data is not None else None

    def commit_batch(self, operations: Iterable[WriteOperation]) -> None:
        operations = list(operations)
        if not operations:
            return
        with self._lock:
            staged = copy.deepcopy(self._load())
            for op in operations:
                records = staged[op.collection]
                payload = clean_fields(op.collection, op.data)
                if op.action == CREATE:
                    records[op.record_id] = payload
                elif op.record_id in records:
                    records[op.record_id].update(payload)
                else:
                    raise RecordNotFound(collection=op.collection, record_id=op.record_id)
            self._persist(staged)
            self._document = staged
        logger.debug("Committed batch of %s operations to %s.", len(operations), self.identity)

    def _delete(self, collection: str, record_id: str) -> None:
        with self._lock:
            staged = copy.deepcopy(self._load())
            if staged[collection].pop(record_id, None) is None:
                raise RecordNotFound(collection=collection, record_id=record_id)
            self._persist(staged)
            self._document = staged

    def delete_subject(self, subject_id: str) -> None:
        self._delete(SUBJECTS, subject_id)

    def delete_trainee(self, trainee_id: str) -> None:
        self._delete(TRAINEES, trainee_id)

    def clear(self) -> Dict[str, int]:
        with self._lock:
            current = self._load()
            counts = {collection: len(current[collection]) for collection in COLLECTIONS}
            empty = _empty_document()
            self._persist(empty)
            self._document = empty
        return counts
