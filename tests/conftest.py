"""Pytest configuration and fixtures."""

import logging

import pytest


@pytest.fixture(autouse=True)
def cleanup_loggers():
    """Clean up multitool loggers after each test so handlers don't leak between tests."""
    yield

    loggers_to_remove = [
        name
        for name in logging.Logger.manager.loggerDict.keys()
        if name.startswith("multitool")
    ]

    for name in loggers_to_remove:
        logger = logging.getLogger(name)
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
        del logging.Logger.manager.loggerDict[name]


@pytest.fixture
def record_file(tmp_path):
    return tmp_path / "passFail.txt"


@pytest.fixture
def write_record(record_file):
    """Helper that writes raw lines to the record file and returns its path."""

    def _write(*lines: str):
        record_file.write_text("".join(line + "\n" for line in lines))
        return record_file

    return _write
