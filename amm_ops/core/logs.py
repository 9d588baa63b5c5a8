"""Logging setup for the amm-ops command line"""

import logging
import sys

LOGGER_NAME = "amm_ops"

SIMPLE_FORMAT = "%(levelname)s: %(message)s"
DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name=None):
    """Logger under the amm_ops namespace"""
    if name is None:
        return logging.getLogger(LOGGER_NAME)
    if name == LOGGER_NAME or name.startswith(LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def setup_logging(verbose=False):
    """
    Attach a stderr handler to the amm_ops logger.

    Args:
        verbose: DEBUG with file/line details instead of WARNING-and-up

    Returns:
        The configured package logger
    """
    logger = get_logger()
    level = logging.DEBUG if verbose else logging.WARNING
    logger.setLevel(level)

    # Repeated calls (tests, multiple CLI invocations in one process) reuse the handler
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    formatter = logging.Formatter(
        DETAILED_FORMAT if verbose else SIMPLE_FORMAT,
        datefmt=DATE_FORMAT,
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger
