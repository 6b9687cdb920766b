import tempfile
import unittest
from pathlib import Path

from config import Settings, read_env_file, truthy


class TestSettings(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.env_file = Path(self._tmp.name) / ".env"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_defaults(self) -> None:
        settings = Settings.load(environ={}, env_file=self.env_file)
        self.assertEqual(settings.drop_policy, "vertical")
        self.assertEqual(settings.log_level, "INFO")
        self.assertTrue(settings.alt_screen)
        self.assertEqual(settings.data_dir.name, "data")

    def test_env_file_then_environment(self) -> None:
        self.env_file.write_text(
            "# local overrides\n"
            "TASKTREE_DROP_POLICY=horizontal\n"
            "TASKTREE_ALT_SCREEN=off\n"
            "TASKTREE_DATA_DIR='/tmp/boards'\n"
            "OTHER=ignored\n",
            encoding="utf-8",
        )
        self.assertNotIn("OTHER", read_env_file(self.env_file))
        settings = Settings.load(environ={}, env_file=self.env_file)
        self.assertEqual(settings.drop_policy, "horizontal")
        self.assertFalse(settings.alt_screen)
        self.assertEqual(settings.data_dir, Path("/tmp/boards"))

        settings = Settings.load(environ={"TASKTREE_DROP_POLICY": "Vertical",
                                          "TASKTREE_LOG_LEVEL": "debug"},
                                 env_file=self.env_file)
        self.assertEqual(settings.drop_policy, "vertical")
        self.assertEqual(settings.log_level, "DEBUG")

    def test_truthy(self) -> None:
        self.assertTrue(truthy(None))
        self.assertFalse(truthy(None, False))
        self.assertFalse(truthy(" No "))
        self.assertTrue(truthy("1"))


if __name__ == "__main__":
    unittest.main()
