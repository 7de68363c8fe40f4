import json
import tempfile
from io import StringIO
from pathlib import Path

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, override_settings

from trainee_records.models import Trainee
from trainee_records.stores.local import LocalRecordStore

ROSTER = "رقم المتدرب,رمز المقرر\n12345,MTH101\n12345,ENG102\n"


class ImportRosterCommandTests(TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        self.roster = Path(self.tmpdir.name) / "roster.csv"
        self.roster.write_bytes(ROSTER.encode("utf-8"))

    def test_imports_into_local_store(self):
        store_path = Path(self.tmpdir.name) / "records.json"
        out = StringIO()

        call_command(
            "import_roster", str(self.roster),
            "--backend", "local", "--local-path", str(store_path),
            stdout=out,
        )

        payload = json.loads(out.getvalue())
        self.assertEqual(payload["status"], "ok")
        self.assertEqual(payload["import"]["subjects_created"], 2)
        self.assertEqual(len(LocalRecordStore(path=str(store_path)).list_trainees()), 1)
        self.assertFalse(Trainee.objects.exists())

    def test_imports_into_database_by_default(self):
        call_command("import_roster", str(self.roster), "--batch-size", "1", stdout=StringIO())

        trainee = Trainee.objects.get(trainee_number="12345")
        self.assertEqual(len(trainee.failed_subject_ids), 2)

    def test_missing_file(self):
        with self.assertRaises(CommandError):
            call_command("import_roster", str(Path(self.tmpdir.name) / "nope.csv"), stdout=StringIO())

    def test_unrecognised_roster_fails(self):
        self.roster.write_bytes(b"foo,bar\n1,2\n")

        with self.assertRaises(CommandError):
            call_command("import_roster", str(self.roster), stdout=StringIO())

    def test_local_path_requires_local_backend(self):
        with self.assertRaises(CommandError):
            call_command(
                "import_roster", str(self.roster),
                "--backend", "database", "--local-path", "x.json",
                stdout=StringIO(),
            )

    def test_invalid_batch_size(self):
        with self.assertRaises(CommandError):
            call_command("import_roster", str(self.roster), "--batch-size", "0", stdout=StringIO())

    def test_local_backend_without_path_is_rejected(self):
        config = {"STORE": {"BACKEND": "database", "OPTIONS": {"path": ""}}}

        with override_settings(TRAINEE_RECORDS=config):
            with self.assertRaises(CommandError):
                call_command("import_roster", str(self.roster), "--backend", "local", stdout=StringIO())

        self.assertFalse(Trainee.objects.exists())

    def test_local_backend_uses_configured_path(self):
        store_path = Path(self.tmpdir.name) / "configured.json"
        config = {"STORE": {"BACKEND": "database", "OPTIONS": {"path": str(store_path)}}}

        with override_settings(TRAINEE_RECORDS=config):
            call_command("import_roster", str(self.roster), "--backend", "local", stdout=StringIO())

        trainees = LocalRecordStore(path=str(store_path)).list_trainees()
        self.assertEqual([t["trainee_number"] for t in trainees], ["12345"])

    def test_configured_in_memory_store_is_rejected(self):
        config = {"STORE": {"BACKEND": "local", "OPTIONS": {}}}

        with override_settings(TRAINEE_RECORDS=config):
            with self.assertRaises(CommandError):
                call_command("import_roster", str(self.roster), stdout=StringIO())
