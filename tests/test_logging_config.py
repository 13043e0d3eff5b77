"""
Test Logging Configuration
"""

from __future__ import annotations

import logging

from config.logging_config import setup_logging


class TestSetupLogging:
    NAME = "signal_engine_test"

    def teardown_method(self):
        logger = logging.getLogger(self.NAME)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

    def test_console_only(self):
        logger = setup_logging(self.NAME, level="warning", log_file=False)

        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.WARNING
        assert logging.getLogger("ccxt").level == logging.WARNING

    def test_daily_file(self, tmp_path):
        logger = setup_logging(self.NAME, level="INFO", log_dir=tmp_path)
        logging.getLogger(f"{self.NAME}.daemon").debug("tick skipped")
        for handler in logger.handlers:
            handler.flush()

        [log_path] = tmp_path.glob("signal_engine_*.log")
        assert "tick skipped" in log_path.read_text(encoding="utf-8")

    def test_repeat_call_replaces_handlers(self, tmp_path):
        setup_logging(self.NAME, log_dir=tmp_path)
        logger = setup_logging(self.NAME, log_dir=tmp_path)
        assert len(logger.handlers) == 2
