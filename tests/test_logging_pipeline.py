"""Tests for structured logging utilities."""

from __future__ import annotations

import io
import json
import logging
import sys

from bill99_signer.logging_pipeline import JsonFormatter, configure_structured_logging


def test_configure_structured_logging_emits_json() -> None:
    logger = logging.getLogger("bill99-signer-test")
    buffer = io.StringIO()
    handler = configure_structured_logging(logger, level=logging.INFO, stream=buffer)
    try:
        logger.info("sample %s", "value", extra={"operation": "sign"})
    finally:
        logger.removeHandler(handler)

    payload = json.loads(buffer.getvalue().strip())
    assert payload["message"] == "sample value"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "bill99-signer-test"
    assert payload["context"]["operation"] == "sign"
    assert "exception" not in payload


def test_json_formatter_includes_exception() -> None:
    try:
        raise ValueError("bad key")
    except ValueError:
        record = logging.getLogger("x").makeRecord(
            "x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
        )

    payload = json.loads(JsonFormatter().format(record))
    assert payload["message"] == "failed"
    assert "ValueError: bad key" in payload["exception"]
