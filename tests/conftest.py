"""Pytest configuration and fixtures."""

import io
import logging
import signal

import pytest

from trapcheck.config import HarnessConfig
from trapcheck.runner import SuiteDriver


@pytest.fixture(autouse=True)
def cleanup_loggers():
    """Clean up trapcheck loggers after each test to prevent name collisions."""
    yield

    loggers_to_remove = [
        name
        for name in logging.Logger.manager.loggerDict.keys()
        if name.startswith("trapcheck")
    ]

    for name in loggers_to_remove:
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()
        del logging.Logger.manager.loggerDict[name]


@pytest.fixture(autouse=True)
def restore_abort_disposition():
    """Never leak a trap handler into the next test."""
    previous = signal.getsignal(signal.SIGABRT)
    yield
    signal.signal(signal.SIGABRT, previous)


@pytest.fixture
def make_driver(tmp_path):
    """Build a SuiteDriver writing to an in-memory stream."""

    def _make(suite, **options):
        options.setdefault("artifact_dir", str(tmp_path / "artifacts"))
        stream = io.StringIO()
        driver = SuiteDriver(suite, HarnessConfig(**options), stream=stream)
        return driver, stream

    return _make
