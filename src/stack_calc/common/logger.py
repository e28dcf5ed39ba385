"""Package-wide logger."""
import logging
import os

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(processName)s %(name)s: %(message)s"


def get_logger(name: str = "stack_calc") -> logging.Logger:
    """
    Return the package logger, attaching a stream handler on first use.

    The level is read from the ``STACK_CALC_LOG_LEVEL`` environment variable (default INFO).

    :param str name: Logger name

    :return: Configured logger
    :rtype: logging.Logger
    """
    log = logging.getLogger(name)
    if not log.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)
        log.setLevel(os.environ.get("STACK_CALC_LOG_LEVEL", "INFO").upper())
    return log


logger = get_logger()
