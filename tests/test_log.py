"""
Tests for the logging setup: console level versus the DEBUG log file.
"""

import logging
import tempfile
import unittest
from pathlib import Path

from web_fuzzer.utils.log import log, setup_logging


class TestSetupLogging(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "logs" / "run.log"

    def tearDown(self):
        for handler in list(log.handlers):
            handler.close()
        setup_logging()
        self._tmp.cleanup()

    def _file_handler(self):
        return next(h for h in log.handlers if isinstance(h, logging.FileHandler))

    def test_log_file_gets_debug_lines_without_debug_flag(self):
        setup_logging(debug=False, log_file=str(self.path))
        log.debug("[SKIP] GET http://h/a: refused")
        self._file_handler().flush()
        self.assertIn("[SKIP] GET http://h/a: refused", self.path.read_text(encoding="utf-8"))

    def test_console_stays_at_info_with_log_file(self):
        setup_logging(debug=False, log_file=str(self.path))
        console = next(h for h in log.handlers if not isinstance(h, logging.FileHandler))
        self.assertEqual(console.level, logging.INFO)
        self.assertEqual(log.level, logging.DEBUG)

    def test_debug_flag_lowers_console_level(self):
        setup_logging(debug=True)
        self.assertEqual(log.handlers[0].level, logging.DEBUG)

    def test_no_log_file_keeps_logger_at_info(self):
        setup_logging(debug=False)
        self.assertEqual(log.level, logging.INFO)
        self.assertEqual(len(log.handlers), 1)

    def test_repeated_setup_does_not_stack_handlers(self):
        setup_logging()
        setup_logging()
        self.assertEqual(len(log.handlers), 1)


if __name__ == "__main__":
    unittest.main()
