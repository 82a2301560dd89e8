"""Pytest configuration and fixtures."""

import logging

import pytest

from shouldkit.mail import Message


@pytest.fixture(autouse=True)
def cleanup_loggers():
    """Clean up shouldkit loggers after each test to prevent name collisions."""
    yield

    loggers_to_remove = [
        name
        for name in logging.Logger.manager.loggerDict.keys()
        if name.startswith("shouldkit")
    ]

    for name in loggers_to_remove:
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()
        del logging.Logger.manager.loggerDict[name]


@pytest.fixture
def hi_there() -> Message:
    return Message(subject="hi there", to=["none@none.com"])
