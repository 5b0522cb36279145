"""Shared fixtures for coflow tests."""

from __future__ import annotations

import logging

import pytest

from coflow.foundation.config import clear_settings_cache
from coflow.runtime.observability import BoundLogger, CaptureRenderer, reset_logging


@pytest.fixture(autouse=True)
def clean_config() -> object:
    """Reload settings and logging configuration around each test."""
    clear_settings_cache()
    reset_logging()
    yield
    clear_settings_cache()
    reset_logging()


@pytest.fixture
def capture() -> CaptureRenderer:
    return CaptureRenderer()


@pytest.fixture
def logger(capture: CaptureRenderer) -> BoundLogger:
    """Logger writing every level into ``capture``."""
    return BoundLogger(context={"logger": "test"}, _renderer=capture, _level=logging.DEBUG)


class HandlerRecorder:
    """unused_result_handler recording each call."""

    def __init__(self) -> None:
        self.calls: list[tuple[object, object, object]] = []

    def __call__(self, error: object, data: object, context: object) -> None:
        self.calls.append((error, data, context))


@pytest.fixture
def handler() -> HandlerRecorder:
    return HandlerRecorder()
