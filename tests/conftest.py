"""Shared fixtures."""

import logging

import pytest


@pytest.fixture(autouse=True)
def reset_knitcalc_logger():
    """Undo configure_logging() so handlers never outlive a captured stream."""
    yield
    app_logger = logging.getLogger("knitcalc")
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
    app_logger.setLevel(logging.NOTSET)
    app_logger.propagate = True
