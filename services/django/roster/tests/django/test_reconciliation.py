from unittest.mock import Mock

from django.test import SimpleTestCase

from trainee_records.constants import SUBJECTS, TRAINEES
from trainee_records.exceptions import BatchCommitFailed, StoreUnavailable
from trainee_records.services.reconciliation import reconcile_import
from trainee_records.stores.local import LocalRecordStore
from trainee_records.utils.header_detector import detect_header
from trainee_records.utils.row_extractor import (
    ExtractionResult,
    extract_rows,
    new_subject_draft,
    new_trainee_draft,
)


def _extract(rows):
    return extract_rows(rows, detect_header(rows))


class RecordingStore(LocalRecordStore):
    """In-memory store that records batches and can fail on demand."""

    def __init__(self, *, fail_on=None, fail_reads=False):
        super().__init__()
        self.batches = []
        self.fail_on = fail_on
        self.fail_reads = fail_reads

    def list_subjects(self):
        if self.fail_reads:
            raise StoreUnavailable(reason="offline")
        return super().list_subjects()

    def commit_batch(self, operations):
        operations = list(operations)
        if self.fail_on and operations and operations[0].collection == self.fail_on:
            raise StoreUnavailable(reason="connection lost")
        self.batches.append(operations)
        super().commit_batch(operations)


class ReconcileImportTests(SimpleTestCase):
    def setUp(self):
        self.rows = [
            ["رقم المتدرب", "رمز المقرر"],
            ["12345", "MTH101"],
            ["12345", "ENG102"],
            ["99", "MTH101"],
        ]

    def test_creates_subjects_and_trainees(self):
        store = RecordingStore()

        summary = reconcile_import(_extract(self.rows), store)

        self.assertEqual(summary["subjects_created"], 2)
        self.assertEqual(summary["subjects_existing"], 0)
        self.assertEqual(summary["trainees_created"], 1)
        self.assertEqual(summary["trainees_updated"], 0)
        self.assertEqual(summary["unresolved_codes"], [])
        self.assertEqual(summary["batches_committed"], 2)
        self.assertTrue(summary["consistent"])

        subject_ids = {s["code"]: s["id"] for s in store.list_subjects()}
        self.assertEqual(set(subject_ids), {"MTH101", "ENG102"})
        trainees = store.list_trainees()
        self.assertEqual(len(trainees), 1)
        self.assertEqual(trainees[0]["trainee_number"], "12345")
        self.assertEqual(
            trainees[0]["failed_subject_ids"],
            [subject_ids["ENG102"], subject_ids["MTH101"]],
        )
        self.assertEqual(trainees[0]["passed_subject_ids"], [])

    def test_subject_batches_are_committed_before_trainees(self):
        store = RecordingStore()

        reconcile_import(_extract(self.rows), store)

        self.assertEqual([batch[0].collection for batch in store.batches], [SUBJECTS, TRAINEES])

    def test_reimport_is_idempotent(self):
        store = RecordingStore()
        reconcile_import(_extract(self.rows), store)
        first_subjects = store.list_subjects()
        first_trainees = store.list_trainees()

        summary = reconcile_import(_extract(self.rows), store)

        self.assertEqual(summary["subjects_created"], 0)
        self.assertEqual(summary["subjects_existing"], 2)
        self.assertEqual(summary["trainees_created"], 0)
        self.assertEqual(summary["trainees_updated"], 1)
        self.assertEqual(store.list_subjects(), first_subjects)
        self.assertEqual(store.list_trainees(), first_trainees)

    def test_existing_trainee_is_updated_not_duplicated(self):
        store = RecordingStore()
        old_subject = store.create_subject(new_subject_draft("OLD100", "Old course"))
        existing = store.create_trainee({
            "full_name": "Trainee 777",
            "trainee_number": "777",
            "national_id": "777",
            "phone_number": "0500000000",
            "major": "Networks",
            "failed_subject_ids": [old_subject["id"]],
        })
        rows = [["رقم المتدرب", "رمز المقرر"], ["777", "NEW101"]]

        summary = reconcile_import(_extract(rows), store)

        self.assertEqual(summary["trainees_created"], 0)
        self.assertEqual(summary["trainees_updated"], 1)
        self.assertEqual(summary["subjects_created"], 1)
        trainees = store.list_trainees()
        self.assertEqual(len(trainees), 1)
        updated = trainees[0]
        new_subject = next(s for s in store.list_subjects() if s["code"] == "NEW101")
        self.assertEqual(updated["id"], existing["id"])
        self.assertEqual(updated["failed_subject_ids"], [new_subject["id"]])
        self.assertEqual(updated["full_name"], "متدرب 777")
        # Roster has no phone/major columns, so stored values survive.
        self.assertEqual(updated["phone_number"], "0500000000")
        self.assertEqual(updated["major"], "Networks")

    def test_matches_on_national_id_when_trainee_number_is_blank(self):
        store = RecordingStore()
        existing = store.create_trainee({"full_name": "Legacy", "trainee_number": "", "national_id": "55555"})
        rows = [["رقم المتدرب", "رمز المقرر"], ["55555", "MTH101"]]

        summary = reconcile_import(_extract(rows), store)

        self.assertEqual(summary["trainees_updated"], 1)
        self.assertEqual([t["id"] for t in store.list_trainees()], [existing["id"]])

    def test_empty_extraction_is_a_noop(self):
        store = Mock()

        summary = reconcile_import(ExtractionResult(), store)

        self.assertEqual(summary["subjects_created"], 0)
        self.assertEqual(summary["trainees_created"], 0)
        self.assertEqual(summary["batches_committed"], 0)
        store.list_subjects.assert_not_called()
        store.commit_batch.assert_not_called()

    def test_unresolved_codes_are_dropped(self):
        store = RecordingStore()
        extraction = ExtractionResult(header_row=0)
        extraction.subjects["MTH101"] = new_subject_draft("MTH101", "Maths")
        draft = new_trainee_draft("12345", "Ali")
        draft["failed_subject_codes"].update({"MTH101", "GHOST1"})
        extraction.trainees["12345"] = draft

        summary = reconcile_import(extraction, store)

        self.assertEqual(summary["unresolved_codes"], ["GHOST1"])
        subject_id = store.list_subjects()[0]["id"]
        self.assertEqual(store.list_trainees()[0]["failed_subject_ids"], [subject_id])

    def test_operations_are_chunked_by_batch_size(self):
        store = RecordingStore()
        rows = [["رقم المتدرب", "رمز المقرر"]]
        rows += [[f"1000{i}", f"CRS10{i}"] for i in range(5)]

        summary = reconcile_import(_extract(rows), store, batch_size=2)

        self.assertEqual([len(batch) for batch in store.batches], [2, 2, 1, 2, 2, 1])
        self.assertEqual(summary["batches_total"], 6)
        self.assertEqual(summary["batches_committed"], 6)

    def test_invalid_batch_size_is_rejected(self):
        with self.assertRaises(ValueError):
            reconcile_import(_extract(self.rows), RecordingStore(), batch_size=0)

    def test_failure_after_subjects_reports_partial_commit(self):
        store = RecordingStore(fail_on=TRAINEES)

        with self.assertRaises(BatchCommitFailed) as ctx:
            reconcile_import(_extract(self.rows), store)

        exc = ctx.exception
        self.assertEqual(exc.phase, TRAINEES)
        self.assertEqual(exc.batches_committed, 1)
        self.assertEqual(exc.batches_total, 2)
        self.assertEqual(exc.subjects_committed, 2)
        self.assertEqual(exc.trainees_committed, 0)
        self.assertTrue(exc.subjects_complete)
        self.assertFalse(exc.trainees_complete)
        self.assertIsInstance(exc.__cause__, StoreUnavailable)
        self.assertFalse(exc.as_dict()["consistent"])
        self.assertEqual(len(store.list_subjects()), 2)
        self.assertEqual(store.list_trainees(), [])

    def test_failure_on_first_batch_propagates_store_error(self):
        store = RecordingStore(fail_on=SUBJECTS)

        with self.assertRaises(StoreUnavailable):
            reconcile_import(_extract(self.rows), store)

        self.assertEqual(store.list_subjects(), [])
        self.assertEqual(store.list_trainees(), [])

    def test_read_failure_commits_nothing(self):
        store = RecordingStore(fail_reads=True)

        with self.assertRaises(StoreUnavailable):
            reconcile_import(_extract(self.rows), store)

        self.assertEqual(store.batches, [])
