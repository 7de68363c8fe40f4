from .importer import import_roster_file, ingest_roster_result, response_payload
from .lookup import clear_records, filter_trainees, lookup_trainee
from .reconciliation import reconcile_import

__all__ = [
    "clear_records",
    "filter_trainees",
    "import_roster_file",
    "ingest_roster_result",
    "lookup_trainee",
    "reconcile_import",
    "response_payload",
]
