"""Tests for registry logging helpers."""

import logging
from typing import Any, Dict, Generator, List, Tuple

import pytest

from ai_model_registry.logging import (
    LOGGER_NAMESPACE,
    LogEvent,
    LogLevel,
    get_logger,
    log_info,
    log_warning,
    set_log_callback,
)


@pytest.fixture
def captured_events() -> Generator[List[Tuple[int, str, Dict[str, Any]]], None, None]:
    events: List[Tuple[int, str, Dict[str, Any]]] = []
    set_log_callback(lambda level, event, data: events.append((level, event, data)))
    yield events
    set_log_callback(None)


def test_logger_namespace() -> None:
    assert get_logger("registry_refresh").name == f"{LOGGER_NAMESPACE}.registry_refresh"
    assert get_logger(f"{LOGGER_NAMESPACE}.cli").name == f"{LOGGER_NAMESPACE}.cli"


def test_callback_receives_events(captured_events) -> None:
    log_warning(LogEvent.SOURCE_FETCH, "Source fetch failed", source="openai", error="timeout")
    assert captured_events == [
        (
            LogLevel.WARNING,
            "source_fetch",
            {"message": "Source fetch failed", "source": "openai", "error": "timeout"},
        )
    ]


def test_failing_callback_does_not_raise(caplog: pytest.LogCaptureFixture) -> None:
    def broken(level: int, event: str, data: Dict[str, Any]) -> None:
        raise RuntimeError("callback bug")

    set_log_callback(broken)
    try:
        with caplog.at_level(logging.ERROR, logger=LOGGER_NAMESPACE):
            log_info(LogEvent.MODEL_REGISTRY, "Installed model snapshot", models=3)
    finally:
        set_log_callback(None)
    assert "Logging callback failed" in caplog.text


def test_standard_logging(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger=LOGGER_NAMESPACE):
        log_info(LogEvent.REGISTRY_REFRESH, "Refreshing models", sources=["models.dev"])
    record = caplog.records[-1]
    assert record.getMessage() == "Refreshing models"
    assert record.name == f"{LOGGER_NAMESPACE}.registry_refresh"
    assert record.data == {"sources": ["models.dev"]}
