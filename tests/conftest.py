"""
Pytest configuration and shared fixtures.
"""
import logging

import pytest
from dotenv import load_dotenv

# Load ONLY the .env.example so tests run with the documented defaults
load_dotenv(".env.example")

from callwatch.interceptor import reset_default_interceptor  # noqa: E402

CAPTURE_LOGGER_NAME = "tests.callwatch"


class FakeClock:
    """Clock returning scripted nanosecond readings; repeats the last one when exhausted."""

    def __init__(self, *readings: int):
        self._readings = list(readings)
        self.calls = 0

    def __call__(self) -> int:
        index = min(self.calls, len(self._readings) - 1)
        self.calls += 1
        return self._readings[index]


@pytest.fixture
def fake_clock():
    """Factory for FakeClock instances."""
    return FakeClock


@pytest.fixture
def capture_logger(caplog):
    """A propagating logger whose INFO records end up in caplog."""
    logger = logging.getLogger(CAPTURE_LOGGER_NAME)
    with caplog.at_level(logging.INFO, logger=CAPTURE_LOGGER_NAME):
        yield logger


@pytest.fixture
def messages(caplog):
    """Rendered messages logged through the capture logger, in order."""
    def _messages():
        return [r.getMessage() for r in caplog.records if r.name == CAPTURE_LOGGER_NAME]
    return _messages


@pytest.fixture(autouse=True)
def fresh_default_interceptor():
    """
    Make sure no test sees a default interceptor built by another one.
    """
    reset_default_interceptor()
    yield
    reset_default_interceptor()
