import threading
import weakref
from contextlib import contextmanager
from typing import Optional

from django.core.exceptions import ImproperlyConfigured
from django.core.signals import setting_changed
from django.dispatch import receiver
from django.utils.module_loading import import_string

from ..conf import get_setting
from .base import CREATE, UPDATE, RecordStore, WriteOperation

__all__ = [
    "CREATE",
    "UPDATE",
    "RecordStore",
    "STORE_ALIASES",
    "WriteOperation",
    "build_record_store",
    "get_record_store",
    "reset_record_store",
    "store_lock",
]

STORE_ALIASES = {
    "database": "trainee_records.stores.database.DatabaseRecordStore",
    "local": "trainee_records.stores.local.LocalRecordStore",
}

_store: Optional[RecordStore] = None
_store_guard = threading.Lock()


class _IdentityLock:
    __slots__ = ("lock", "__weakref__")

    def __init__(self):
        self.lock = threading.Lock()


# Entries vanish once no thread holds or waits on them.
_locks = weakref.WeakValueDictionary()
_locks_guard = threading.Lock()


def build_record_store(config: Optional[dict] = None) -> RecordStore:
    config = config or get_setting("STORE")
    backend = (config or {}).get("BACKEND")
    if not backend:
        raise ImproperlyConfigured("TRAINEE_RECORDS['STORE'] needs a BACKEND.")
    backend = STORE_ALIASES.get(backend, backend)
    try:
        store_class = import_string(backend)
    except ImportError as exc:
        raise ImproperlyConfigured(f"Could not import record store backend '{backend}'.") from exc
    options = {key: value for key, value in (config.get("OPTIONS") or {}).items() if value not in (None, "")}
    store = store_class(**options)
    if not isinstance(store, RecordStore):
        raise ImproperlyConfigured(f"'{backend}' is not a RecordStore.")
    return store


def get_record_store() -> RecordStore:
    """Return the configured store, built once per process."""
    global _store
    with _store_guard:
        if _store is None:
            _store = build_record_store()
        return _store


def reset_record_store() -> None:
    global _store
    with _store_guard:
        _store = None


@receiver(setting_changed)
def _reset_on_settings_change(*, setting, **kwargs):
    if setting == "TRAINEE_RECORDS":
        reset_record_store()


@contextmanager
def store_lock(store: RecordStore):
    """Serialise imports that target the same backing storage."""
    with _locks_guard:
        holder = _locks.get(store.identity)
        if holder is None:
            holder = _locks[store.identity] = _IdentityLock()
    with holder.lock:
        yield
