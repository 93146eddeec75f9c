from pathlib import Path
import sys
import tempfile
import unittest

from loguru import logger

from infrastructure.logging import find_latest_log_file, get_log_directory, init_logging


class TestLogging(unittest.TestCase):
    def tearDown(self):
        logger.remove()
        logger.add(sys.stderr, level="WARNING")

    def test_init_logging_creates_rotating_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            log_dir = init_logging(str(Path(tmp) / "logs"), level="DEBUG")
            logger.info("hello {}", "calendar")
            logger.complete()
            latest = find_latest_log_file(str(log_dir))
            self.assertIsNotNone(latest)
            self.assertTrue(latest.name.startswith("pictocal_"))
            logger.remove()

    def test_find_latest_in_missing_dir(self):
        self.assertIsNone(find_latest_log_file(str(Path(tempfile.gettempdir()) / "no-logs-here-x")))

    def test_default_directory_names_app(self):
        self.assertIn("pictocal", get_log_directory().lower())


if __name__ == "__main__":
    unittest.main()
