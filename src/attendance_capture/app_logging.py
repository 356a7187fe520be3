"""Logging setup for the attendance service."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# httpx logs every request line at INFO, including recognition endpoint URLs.
_NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach one stream handler to the package logger and apply ``level``.

    Repeated calls only update the level, so an app factory invoked per test
    or per reload never stacks handlers.
    """
    logger = logging.getLogger("attendance_capture")
    logger.setLevel(level.upper())
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    return logger
