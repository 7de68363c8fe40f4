from django.test import SimpleTestCase

from trainee_records.exceptions import RequiredColumnsMissing, SchemaNotDetected
from trainee_records.utils.header_detector import ABSENT, detect_header, score_row
from trainee_records.utils.keywords import (
    COURSE_CODE,
    COURSE_NAME,
    IDENTITY,
    MAJOR,
    PHONE,
    TRAINEE_NAME,
    HeaderKeywords,
)


class HeaderDetectorTests(SimpleTestCase):
    def test_detects_header_on_first_row(self):
        rows = [["رقم المتدرب", "رمز المقرر"], ["12345", "MTH101"]]

        detection = detect_header(rows)

        self.assertEqual(detection.row_index, 0)
        self.assertEqual(detection.score, 2)
        self.assertEqual(detection.index_of(IDENTITY), 0)
        self.assertEqual(detection.index_of(COURSE_CODE), 1)
        for role in (COURSE_NAME, TRAINEE_NAME, PHONE, MAJOR):
            self.assertEqual(detection.index_of(role), ABSENT)
            self.assertFalse(detection.has(role))

    def test_header_below_title_rows(self):
        rows = [
            ["الكلية التقنية"],
            [],
            ["تقرير المقررات المتبقية", None],
            ["رقم المتدرب", "اسم المتدرب", "رمز المقرر", "اسم المقرر", "الجوال", "التخصص"],
            ["444123456", "خالد", "MTH101", "رياضيات", "0500000000", "حاسب"],
        ]

        detection = detect_header(rows)

        self.assertEqual(detection.row_index, 3)
        self.assertEqual(detection.index_of(IDENTITY), 0)
        self.assertEqual(detection.index_of(TRAINEE_NAME), 1)
        self.assertEqual(detection.index_of(COURSE_CODE), 2)
        self.assertEqual(detection.index_of(COURSE_NAME), 3)
        self.assertEqual(detection.index_of(PHONE), 4)
        self.assertEqual(detection.index_of(MAJOR), 5)

    def test_headers_are_matched_case_insensitively(self):
        rows = [["  Trainee No ", "COURSE CODE"], ["1001", "CS101"]]

        detection = detect_header(rows)

        self.assertEqual(detection.index_of(IDENTITY), 0)
        self.assertEqual(detection.index_of(COURSE_CODE), 1)
        self.assertEqual(detection.columns, {"trainee no": 0, "course code": 1})

    def test_higher_score_replaces_earlier_row(self):
        rows = [["رقم الطلب"], ["رقم المتدرب", "رمز المقرر"]]

        self.assertEqual(detect_header(rows).row_index, 1)

    def test_ties_keep_earliest_row(self):
        rows = [
            ["رقم المتدرب", "رمز المقرر"],
            ["رقم المتدرب", "رمز المقرر"],
        ]

        self.assertEqual(detect_header(rows).row_index, 0)

    def test_no_keywords_raises_schema_not_detected(self):
        rows = [["foo", "bar"], ["1", "2"]]

        with self.assertRaises(SchemaNotDetected) as ctx:
            detect_header(rows)

        self.assertEqual(ctx.exception.code, "schema_not_detected")
        self.assertIn("رقم المتدرب", ctx.exception.message)
        self.assertEqual(ctx.exception.details["rows_scanned"], 2)

    def test_empty_input_raises_schema_not_detected(self):
        with self.assertRaises(SchemaNotDetected):
            detect_header([])

    def test_header_beyond_scan_window_is_not_found(self):
        rows = [["-"] for _ in range(25)] + [["رقم المتدرب", "رمز المقرر"]]

        with self.assertRaises(SchemaNotDetected):
            detect_header(rows)

        self.assertEqual(detect_header(rows, max_scan_rows=30).row_index, 25)

    def test_missing_course_code_column_raises(self):
        rows = [["رقم المتدرب", "الاسم"], ["12345", "علي"]]

        with self.assertRaises(RequiredColumnsMissing) as ctx:
            detect_header(rows)

        self.assertEqual(ctx.exception.details["missing"], [COURSE_CODE])
        self.assertEqual(ctx.exception.details["header_row"], 0)

    def test_repeated_label_points_at_last_column(self):
        rows = [["رقم المتدرب", "رمز المقرر", "رقم المتدرب"]]

        detection = detect_header(rows)

        self.assertEqual(detection.index_of(IDENTITY), 2)

    def test_custom_keywords(self):
        keywords = HeaderKeywords().with_overrides(identity=("matricule",), course_code=("module",))
        rows = [["Matricule", "Module"], ["A1234", "M01"]]

        detection = detect_header(rows, keywords)

        self.assertEqual(detection.index_of(IDENTITY), 0)
        self.assertEqual(detection.index_of(COURSE_CODE), 1)

    def test_score_row_counts_required_groups_once(self):
        keywords = HeaderKeywords()

        self.assertEqual(score_row(["رقم", "رقم الهوية"], keywords), 1)
        self.assertEqual(score_row(["رقم", "رمز"], keywords), 2)
        self.assertEqual(score_row([], keywords), 0)

    def test_keywords_require_identity_and_code_groups(self):
        with self.assertRaises(ValueError):
            HeaderKeywords(groups={IDENTITY: ("id",)})
