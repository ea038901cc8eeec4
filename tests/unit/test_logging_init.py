from __future__ import annotations

import logging
from io import StringIO

from orders_sync.logging.init import (
    APP_LOGGER_NAME,
    SUMMARY_LEVEL,
    LabeledFormatter,
    get_logger,
    log_summary,
    set_debug,
    setup_logging,
)


def test_setup_logging_creates_app_logger():
    logger = setup_logging()
    assert logger.name == APP_LOGGER_NAME
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)
    assert logger.propagate is False


def test_setup_logging_idempotent():
    assert setup_logging() is setup_logging()
    assert get_logger() is setup_logging()
    assert len(get_logger().handlers) == 1


def test_labeled_prefixes():
    captured = StringIO()
    logger = logging.getLogger("test_orders_sync_labels")
    logger.setLevel(logging.INFO)
    for h in logger.handlers[:]:
        logger.removeHandler(h)
    handler = logging.StreamHandler(captured)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    logger.info("Test info message")
    logger.warning("Test warning message")
    logger.error("Test error message")
    logger.log(SUMMARY_LEVEL, "Test summary message")

    assert captured.getvalue().strip().split("\n") == [
        "INFO Test info message",
        "WARN Test warning message",
        "ERROR Test error message",
        "SUMMARY Test summary message",
    ]


def test_module_loggers_reach_app_handler(capsys):
    setup_logging()
    logging.getLogger("orders_sync.services.upsert").warning("row=5 conflict")
    log_summary("mode=full scanned=0")
    out = capsys.readouterr().out
    assert "WARN row=5 conflict" in out
    assert "SUMMARY mode=full scanned=0" in out


def test_set_debug_switches_levels(capsys):
    logger = setup_logging()
    set_debug(True)
    assert logger.level == logging.DEBUG
    assert all(h.level == logging.DEBUG for h in logger.handlers)
    set_debug(False)
    assert logger.level == logging.INFO
