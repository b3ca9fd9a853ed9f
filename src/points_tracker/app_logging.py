"""Logging configuration helpers."""

import logging

_NOISY_LOGGERS = ("httpx", "httpcore", "realtime", "hpack")


def configure_logging(level: str = "INFO") -> None:
    """Configure the package logger with a single stream handler.

    Transport libraries log every request and realtime heartbeat at INFO, so
    they are capped at WARNING.
    """
    logger = logging.getLogger("points_tracker")
    logger.setLevel(level.upper())
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s: %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
