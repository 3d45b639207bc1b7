"""Logging setup for the command line.

Library code only calls `logging.getLogger(__name__)` (or uses an injected
logger); handlers are attached here, once, by the CLI.

Environment variables:
    TESTGEN_LOG_LEVEL: overrides the console level (DEBUG, INFO, WARNING, ...)
"""

import logging
import os
import sys

LOGGER_NAME = "postman_testgen"
LOG_FORMAT = "[%(asctime)s] %(levelname)-7s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(verbose: bool = False) -> logging.Logger:
    default_level = "DEBUG" if verbose else "INFO"
    level_name = os.getenv("TESTGEN_LOG_LEVEL", default_level).upper()
    level = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # replace our handler so it writes to the current sys.stderr
    for old in [h for h in logger.handlers if getattr(h, "_testgen", False)]:
        logger.removeHandler(old)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.setLevel(level)
    handler._testgen = True
    logger.addHandler(handler)
    return logger
