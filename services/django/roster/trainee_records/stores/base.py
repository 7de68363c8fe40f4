import abc
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from ..constants import COLLECTIONS, NATURAL_KEY_FIELDS, SUBJECTS, TRAINEES

CREATE = "create"
UPDATE = "update"

SUBJECT_FIELDS = ("name", "code", "level", "credit_hours")
TRAINEE_FIELDS = (
    "full_name",
    "national_id",
    "trainee_number",
    "phone_number",
    "major",
    "gpa",
    "completed_hours",
    "remaining_hours",
    "passed_subject_ids",
    "failed_subject_ids",
)
FIELDS = {SUBJECTS: SUBJECT_FIELDS, TRAINEES: TRAINEE_FIELDS}


@dataclass
class WriteOperation:
    action: str
    collection: str
    record_id: str
    data: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.action not in (CREATE, UPDATE):
            raise ValueError(f"Unknown write action: {self.action}")
        if self.collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {self.collection}")
        if not self.record_id:
            raise ValueError("Write operations need a record id.")


def clean_fields(collection: str, data: Dict[str, Any]) -> Dict[str, Any]:
    allowed = FIELDS[collection]
    return {key: value for key, value in (data or {}).items() if key in allowed}


class RecordStore(abc.ABC):
    """
    Persistence contract for subjects and trainees.

    Records are plain dicts with an ``id`` key. Implementations must raise
    ``StoreUnavailable`` when the backing storage cannot be reached and never
    swallow a failed batch.
    """

    backend_name = "abstract"

    @property
    def identity(self) -> str:
        """Stable name of the backing storage, used to serialise imports."""
        return self.backend_name

    def new_id(self, collection: str) -> str:
        return uuid.uuid4().hex

    @abc.abstractmethod
    def list_subjects(self) -> List[Dict[str, Any]]:
        ...

    @abc.abstractmethod
    def list_trainees(self) -> List[Dict[str, Any]]:
        ...

    @abc.abstractmethod
    def get_record(self, collection: str, record_id: str) -> Optional[Dict[str, Any]]:
        ...

    @abc.abstractmethod
    def commit_batch(self, operations: Iterable[WriteOperation]) -> None:
        """Apply every operation or none of them."""

    @abc.abstractmethod
    def delete_subject(self, subject_id: str) -> None:
        ...

    @abc.abstractmethod
    def delete_trainee(self, trainee_id: str) -> None:
        ...

    @abc.abstractmethod
    def clear(self) -> Dict[str, int]:
        ...

    def create_subject(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._create(SUBJECTS, data)

    def create_trainee(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._create(TRAINEES, data)

    def update_trainee(self, trainee_id: str, data: Dict[str, Any]) -> None:
        self.commit_batch([WriteOperation(UPDATE, TRAINEES, trainee_id, clean_fields(TRAINEES, data))])

    def find_trainee(self, key: str) -> Optional[Dict[str, Any]]:
        """Find a trainee by natural key, trying each key field in priority order."""
        key = str(key or "").strip()
        if not key:
            return None
        trainees = self.list_trainees()
        for field_name in NATURAL_KEY_FIELDS:
            for record in trainees:
                if str(record.get(field_name) or "").strip() == key:
                    return record
        return None

    def _create(self, collection: str, data: Dict[str, Any]) -> Dict[str, Any]:
        record_id = self.new_id(collection)
        payload = clean_fields(collection, data)
        self.commit_batch([WriteOperation(CREATE, collection, record_id, payload)])
        return {"id": record_id, **payload}
