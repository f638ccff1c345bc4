from __future__ import annotations

import io
import json

import structlog

from scent_layering.core.logging import configure_logging, get_logger


def test_configure_logging_writes_json_lines_to_stream(settings):
    stream = io.StringIO()
    try:
        configure_logging("INFO", settings=settings, json_output=True, stream=stream)
        logger = get_logger("tests.logging")
        logger.info("cache.hit", key="bleu")
        logger.debug("cache.miss", key="hidden")

        lines = [json.loads(line) for line in stream.getvalue().splitlines()]
    finally:
        structlog.reset_defaults()

    assert len(lines) == 1
    assert lines[0]["event"] == "cache.hit"
    assert lines[0]["key"] == "bleu"
    assert lines[0]["level"] == "info"
    assert "timestamp" in lines[0]
