from django.conf import settings

from . import constants

DEFAULTS = {
    "STORE": {
        "BACKEND": "trainee_records.stores.database.DatabaseRecordStore",
        "OPTIONS": {},
    },
    "IMPORT_BATCH_SIZE": constants.IMPORT_BATCH_SIZE,
    "HEADER_SCAN_ROWS": constants.HEADER_SCAN_ROWS,
    "FALLBACK_TEXT_ENCODING": constants.FALLBACK_TEXT_ENCODING,
}


def get_setting(name):
    """Read a TRAINEE_RECORDS setting, falling back to the package default."""
    configured = getattr(settings, "TRAINEE_RECORDS", None) or {}
    if name in configured:
        return configured[name]
    return DEFAULTS[name]
