import logging

import pytest

from postman_testgen.log import LOGGER_NAME


@pytest.fixture(autouse=True)
def reset_package_logger():
    """CLI invocations configure the package logger; undo it after each test."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in [h for h in logger.handlers if getattr(h, "_testgen", False)]:
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
