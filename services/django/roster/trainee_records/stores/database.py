import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional

from django.db import DEFAULT_DB_ALIAS, DatabaseError, IntegrityError, transaction

from ..constants import NATURAL_KEY_FIELDS, SUBJECTS, TRAINEES
from ..exceptions import RecordNotFound, RecordStoreError, StoreUnavailable
from ..models import Subject, Trainee
from .base import CREATE, FIELDS, RecordStore, WriteOperation, clean_fields

logger = logging.getLogger(__name__)

MODELS = {SUBJECTS: Subject, TRAINEES: Trainee}


def model_to_record(obj, collection: str) -> Dict[str, Any]:
    record = {"id": obj.pk}
    for field_name in FIELDS[collection]:
        record[field_name] = getattr(obj, field_name)
    return record


class DatabaseRecordStore(RecordStore):
    """Shared store backed by the Django database (PostgreSQL in deployment)."""

    backend_name = "database"

    def __init__(self, using: str = DEFAULT_DB_ALIAS, **_options):
        self.using = using or DEFAULT_DB_ALIAS

    @property
    def identity(self) -> str:
        return f"{self.backend_name}:{self.using}"

    def _objects(self, collection: str):
        return MODELS[collection].objects.using(self.using)

    @contextmanager
    def _guard(self, action: str):
        try:
            yield
        except IntegrityError as exc:
            logger.warning("Database rejected %s: %s", action, exc)
            raise RecordStoreError(f"The database rejected the {action}.", reason=str(exc)) from exc
        except DatabaseError as exc:
            logger.error("Database unavailable during %s: %s", action, exc)
            raise StoreUnavailable(reason=str(exc)) from exc

    def list_subjects(self) -> List[Dict[str, Any]]:
        with self._guard("subject listing"):
            return [model_to_record(obj, SUBJECTS) for obj in self._objects(SUBJECTS).all()]

    def list_trainees(self) -> List[Dict[str, Any]]:
        with self._guard("trainee listing"):
            return [model_to_record(obj, TRAINEES) for obj in self._objects(TRAINEES).all()]

    def get_record(self, collection: str, record_id: str) -> Optional[Dict[str, Any]]:
        with self._guard("record lookup"):
            obj = self._objects(collection).filter(pk=record_id).first()
        return model_to_record(obj, collection) if obj else None

    def find_trainee(self, key: str) -> Optional[Dict[str, Any]]:
        key = str(key or "").strip()
        if not key:
            return None
        with self._guard("trainee lookup"):
            for field_name in NATURAL_KEY_FIELDS:
                obj = self._objects(TRAINEES).filter(**{field_name: key}).order_by("pk").first()
                if obj:
                    return model_to_record(obj, TRAINEES)
        return None

    def commit_batch(self, operations: Iterable[WriteOperation]) -> None:
        operations = list(operations)
        if not operations:
            return

        with self._guard("write batch"), transaction.atomic(using=self.using):
            for collection, model in MODELS.items():
                creates = [
                    model(pk=op.record_id, **clean_fields(collection, op.data))
                    for op in operations
                    if op.collection == collection and op.action == CREATE
                ]
                if creates:
                    model.objects.using(self.using).bulk_create(creates)

            for op in operations:
                if op.action == CREATE:
                    continue
                updated = self._objects(op.collection).filter(pk=op.record_id).update(
                    **clean_fields(op.collection, op.data)
                )
                if not updated:
                    raise RecordNotFound(collection=op.collection, record_id=op.record_id)

        logger.debug("Committed batch of %s operations to %s.", len(operations), self.identity)

    def _delete(self, collection: str, record_id: str) -> None:
        with self._guard("delete"):
            deleted, _ = self._objects(collection).filter(pk=record_id).delete()
        if not deleted:
            raise RecordNotFound(collection=collection, record_id=record_id)

    def delete_subject(self, subject_id: str) -> None:
        self._delete(SUBJECTS, subject_id)

    def delete_trainee(self, trainee_id: str) -> None:
        self._delete(TRAINEES, trainee_id)

    def clear(self) -> Dict[str, int]:
        with self._guard("clear"), transaction.atomic(using=self.using):
            trainees, _ = self._objects(TRAINEES).all().delete()
            subjects, _ = self._objects(SUBJECTS).all().delete()
        return {SUBJECTS: subjects, TRAINEES: trainees}
