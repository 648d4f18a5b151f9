from __future__ import annotations

import io
import json
from typing import Iterator

import pytest
import structlog

from talentmatch import __version__
from talentmatch.logging import configure_logging


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    yield
    structlog.reset_defaults()


def test_json_output_carries_context_and_service() -> None:
    stream = io.StringIO()
    configure_logging("INFO", stream=stream)
    logger = structlog.get_logger("talentmatch.test")

    with structlog.contextvars.bound_contextvars(run_id="run-1"):
        logger.debug("matching.hidden")
        logger.info("matching.visible", candidates=3)

    lines = [json.loads(line) for line in stream.getvalue().splitlines()]
    assert len(lines) == 1
    event = lines[0]
    assert event["event"] == "matching.visible"
    assert event["candidates"] == 3
    assert event["run_id"] == "run-1"
    assert event["level"] == "info"
    assert event["service"] == "talentmatch"
    assert event["version"] == __version__
    assert "timestamp" in event


def test_console_output() -> None:
    stream = io.StringIO()
    configure_logging("debug", fmt="console", stream=stream)

    structlog.get_logger("talentmatch.test").debug("matching.scored", candidates=2)

    output = stream.getvalue()
    assert "matching.scored" in output
    assert "candidates=2" in output


@pytest.mark.parametrize(("level", "fmt"), [("LOUD", "json"), ("INFO", "xml")])
def test_invalid_settings_raise(level: str, fmt: str) -> None:
    with pytest.raises(ValueError):
        configure_logging(level, fmt=fmt)
