"""
Tests for WarningsLog and logging setup.
"""

import io
import logging

from code_anonymizer.logging_config import LOGGER_NAME, get_logger, setup_logging
from code_anonymizer.warnings_log import WarningsLog


class TestWarningsLog:
    """Tests for WarningsLog."""

    def test_add_formats_message(self):
        log = WarningsLog(source="main.c")
        log.add("Header 'x.h' not found", line_number=3)
        assert log.warnings == ["main.c: line 3: Header 'x.h' not found"]
        assert log.has_warnings()

    def test_extend_and_clear(self):
        log = WarningsLog()
        log.extend(["one", "two"])
        assert len(log) == 2
        assert list(log) == ["one", "two"]
        log.clear()
        assert not log.has_warnings()

    def test_warnings_is_a_copy(self):
        log = WarningsLog()
        log.add("one")
        log.warnings.append("two")
        assert log.warnings == ["one"]


class TestLogging:
    """Tests for logging setup."""

    def test_child_logger(self):
        assert get_logger("rewriter").name == f"{LOGGER_NAME}.rewriter"

    def test_setup_logging(self, tmp_path):
        log_file = tmp_path / "run.log"
        logger = setup_logging("debug", log_file)

        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2
        get_logger("test").debug("hello")
        for handler in logger.handlers:
            handler.flush()
        assert "hello" in log_file.read_text()
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()

    def test_console_stream_and_format(self):
        """Records go to the given stream; repeated setup replaces handlers."""
        setup_logging("info")
        stream = io.StringIO()
        logger = setup_logging("warning", stream=stream)

        get_logger("reserved").info("skipped")
        get_logger("reserved").warning("Standard header <stdio.h> not found")

        assert len(logger.handlers) == 1
        assert stream.getvalue() == "WARNING: Standard header <stdio.h> not found\n"
        logger.handlers.clear()
