"""Tests for logging helpers"""

import json
import logging

from ussd_gateway.observability.logging import LOGGER_NAME, ContextLogger, mask_phone, setup_logging


def test_mask_phone():
    assert mask_phone("+237670000123") == "+23767000****"
    assert mask_phone("") == ""
    assert mask_phone(None) == ""


def test_context_logger_adds_extra(caplog):
    """Context values end up on the log record"""
    log = ContextLogger("tests.context").with_context(session_id="AT-1")

    with caplog.at_level(logging.INFO, logger="tests.context"):
        log.info("hello")

    assert caplog.records[-1].session_id == "AT-1"


def test_setup_logging_writes_json_file(tmp_path):
    # Arrange
    log_file = tmp_path / "gateway.jsonl"
    setup_logging("DEBUG", str(log_file))
    gateway_logger = logging.getLogger(LOGGER_NAME)

    # Act
    try:
        logging.getLogger(f"{LOGGER_NAME}.test").info("structured", extra={"session_id": "AT-9"})
        for handler in gateway_logger.handlers:
            handler.flush()
    finally:
        for handler in list(gateway_logger.handlers):
            gateway_logger.removeHandler(handler)
            handler.close()
        gateway_logger.propagate = True
        gateway_logger.setLevel(logging.NOTSET)

    # Assert
    record = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
    assert record["message"] == "structured"
    assert record["session_id"] == "AT-9"
