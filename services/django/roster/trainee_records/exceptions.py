from typing import Any, Dict, Optional


class RosterImportError(Exception):
    """Base class for every failure the roster import can report to a caller."""

    code = "import_error"
    default_message = "The roster could not be imported."
    http_status = 400

    def __init__(self, message: Optional[str] = None, **details: Any):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "status": "error",
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            payload["details"] = self.details
        return payload


class SchemaNotDetected(RosterImportError):
    code = "schema_not_detected"
    default_message = (
        "Could not recognise the column headers. Make sure the sheet has a "
        "trainee number column (e.g. 'رقم المتدرب') and a course code column "
        "(e.g. 'رمز المقرر'), or check the file encoding."
    )


class RequiredColumnsMissing(RosterImportError):
    code = "required_columns_missing"
    default_message = (
        "The header row is incomplete. The sheet needs one column for the "
        "trainee number and one for the course code."
    )


class EmptyExtraction(RosterImportError):
    code = "empty_extraction"
    http_status = 200
    default_message = "The file was read but no valid trainee rows were found."

    def as_dict(self) -> Dict[str, Any]:
        payload = super().as_dict()
        payload["status"] = "empty"
        return payload


class RecordStoreError(RosterImportError):
    code = "store_error"
    http_status = 500
    default_message = "The record store rejected the request."


class StoreUnavailable(RecordStoreError):
    code = "store_unavailable"
    http_status = 503
    default_message = "The record store is unavailable. Nothing was saved."


class RecordNotFound(RecordStoreError):
    code = "record_not_found"
    http_status = 404
    default_message = "The requested record does not exist."


class BatchCommitFailed(RecordStoreError):
    """
    A write batch failed after earlier batches were already committed.

    The store is left with a partial import; ``progress`` tells the caller
    exactly which portion landed.
    """

    code = "batch_commit_failed"
    default_message = (
        "The import stopped part-way through. Some records were saved and "
        "the store is in an inconsistent state; re-run the import."
    )

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        phase: str,
        batches_committed: int,
        batches_total: int,
        subjects_committed: int,
        trainees_committed: int,
        subjects_pending: int,
        trainees_pending: int,
    ):
        super().__init__(
            message,
            phase=phase,
            batches_committed=batches_committed,
            batches_total=batches_total,
            subjects_committed=subjects_committed,
            trainees_committed=trainees_committed,
            subjects_pending=subjects_pending,
            trainees_pending=trainees_pending,
        )
        self.phase = phase
        self.batches_committed = batches_committed
        self.batches_total = batches_total
        self.subjects_committed = subjects_committed
        self.trainees_committed = trainees_committed
        self.subjects_pending = subjects_pending
        self.trainees_pending = trainees_pending

    @property
    def subjects_complete(self) -> bool:
        return self.subjects_pending == 0

    @property
    def trainees_complete(self) -> bool:
        return self.trainees_pending == 0

    def as_dict(self) -> Dict[str, Any]:
        payload = super().as_dict()
        payload["consistent"] = False
        return payload


class UnreadableRoster(RosterImportError):
    code = "unreadable_file"
    default_message = "The file could not be opened as a spreadsheet or delimited text file."
