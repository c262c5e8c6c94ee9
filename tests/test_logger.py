import logging
import os
import tempfile
from unittest import TestCase

from gcloud_context.utils.logger import CleanFormatter, get_logger, log_api_response, setup_logging


class TestLogger(TestCase):
    def tearDown(self):
        logger = get_logger()
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()

    def test_clean_formatter(self):
        formatter = CleanFormatter("%(message)s")

        def fmt(level):
            return formatter.format(logging.LogRecord("gcloud_context", level, __file__, 1, "hello", None, None))

        self.assertEqual(fmt(logging.INFO), "hello")
        self.assertEqual(fmt(logging.WARNING), "[!]  WARNING: hello")
        self.assertEqual(fmt(logging.ERROR), "[X] ERROR: hello")

    def test_setup_logging_levels(self):
        self.assertEqual(setup_logging("WARNING").level, logging.WARNING)
        self.assertEqual(setup_logging("INFO", debug=True).level, logging.DEBUG)
        # Called twice, still one console handler
        self.assertEqual(len(get_logger().handlers), 1)

    def test_log_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "logs", "boot.log")
            logger = setup_logging("INFO", log_file=path)
            logger.info("instance ready")
            for handler in logger.handlers:
                handler.flush()

            with open(path) as f:
                self.assertIn("instance ready", f.read())
            self.tearDown()

    def test_api_response_is_truncated(self):
        logger = get_logger()
        logger.setLevel(logging.DEBUG)
        with self.assertLogs("gcloud_context", level="DEBUG") as logs:
            log_api_response(logger, "x" * 500, truncate=10)
        self.assertEqual(logs.output, ["DEBUG:gcloud_context:API response: xxxxxxxxxx..."])
