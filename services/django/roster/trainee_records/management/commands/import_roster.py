import json
from pathlib import Path

from django.core.exceptions import ImproperlyConfigured
from django.core.management.base import BaseCommand, CommandError

from trainee_records.conf import get_setting
from trainee_records.exceptions import RecordStoreError
from trainee_records.services import import_roster_file
from trainee_records.stores import STORE_ALIASES, build_record_store, get_record_store
from trainee_records.stores.local import LocalRecordStore


def _configured_local_path():
    options = (get_setting("STORE") or {}).get("OPTIONS") or {}
    return options.get("path") or ""


class Command(BaseCommand):
    help = "Import a trainee roster (xlsx, xls or delimited text) into the record store"

    def add_arguments(self, parser):
        parser.add_argument("path")
        parser.add_argument("--backend", choices=sorted(STORE_ALIASES), default="")
        parser.add_argument("--local-path", default="")
        parser.add_argument("--batch-size", type=int, default=None)

    def handle(self, *args, **options):
        path = Path(options["path"]).expanduser()
        if not path.is_file():
            raise CommandError(f"No such file: {path}")

        backend = (options.get("backend") or "").strip()
        local_path = (options.get("local_path") or "").strip()
        if local_path and backend not in ("", "local"):
            raise CommandError("--local-path only applies to the local backend.")

        try:
            if backend or local_path:
                backend = backend or "local"
                store_options = {}
                if backend == "local":
                    store_options["path"] = local_path or _configured_local_path()
                store = build_record_store({"BACKEND": backend, "OPTIONS": store_options})
            else:
                store = get_record_store()
        except ImproperlyConfigured as exc:
            raise CommandError(str(exc)) from exc

        # A process-local store would be discarded as soon as the command exits.
        if isinstance(store, LocalRecordStore) and store.path is None:
            raise CommandError(
                "The local backend needs --local-path or TRAINEE_RECORDS_LOCAL_PATH."
            )

        try:
            payload = import_roster_file(str(path), store=store, batch_size=options.get("batch_size"))
        except RecordStoreError as exc:
            self.stderr.write(json.dumps(exc.as_dict(), ensure_ascii=False, indent=2))
            raise CommandError(exc.message) from exc
        except ValueError as exc:
            raise CommandError(str(exc)) from exc

        self.stdout.write(json.dumps(payload, ensure_ascii=False, indent=2))

        if payload.get("status") == "empty":
            self.stderr.write(self.style.WARNING(payload.get("message", "No trainee rows found.")))
        elif payload.get("status") != "ok":
            raise CommandError(payload.get("message", "Import failed."))
