import os

from django.test import SimpleTestCase, override_settings

from django_project import settings as project_settings
from trainee_records.conf import DEFAULTS, get_setting


class SettingsHelperTests(SimpleTestCase):
    def _set_env(self, name, value):
        os.environ[name] = value
        self.addCleanup(os.environ.pop, name, None)

    def test_env_list_splits_and_trims(self):
        self._set_env("DJANGO_TEST_LIST", " alpha ,beta,, gamma ")

        result = project_settings.env_list("DJANGO_TEST_LIST")
        self.assertEqual(result, ["alpha", "beta", "gamma"])

    def test_env_flag_accepts_truthy_words(self):
        self._set_env("DJANGO_TEST_FLAG", " Yes ")

        self.assertTrue(project_settings.env_flag("DJANGO_TEST_FLAG"))
        self.assertFalse(project_settings.env_flag("DJANGO_TEST_MISSING_FLAG"))

    def test_env_int_falls_back_on_blank_or_invalid(self):
        self._set_env("DJANGO_TEST_INT", "250")
        self.assertEqual(project_settings.env_int("DJANGO_TEST_INT", 400), 250)

        self._set_env("DJANGO_TEST_INT", "lots")
        self.assertEqual(project_settings.env_int("DJANGO_TEST_INT", 400), 400)

        self._set_env("DJANGO_TEST_INT", " ")
        self.assertEqual(project_settings.env_int("DJANGO_TEST_INT", 400), 400)


class TraineeRecordsSettingTests(SimpleTestCase):
    def test_configured_values_win(self):
        with override_settings(TRAINEE_RECORDS={"IMPORT_BATCH_SIZE": 50}):
            self.assertEqual(get_setting("IMPORT_BATCH_SIZE"), 50)
            self.assertEqual(get_setting("FALLBACK_TEXT_ENCODING"), DEFAULTS["FALLBACK_TEXT_ENCODING"])

    def test_defaults_without_setting(self):
        with override_settings(TRAINEE_RECORDS=None):
            self.assertEqual(get_setting("HEADER_SCAN_ROWS"), 25)
            self.assertEqual(get_setting("IMPORT_BATCH_SIZE"), 400)
