"""Logging setup for the server (configured once, at startup)."""

import logging
import sys

LOG_FORMATS: dict[str, str] = {
    "simple": "%(name)s - %(levelname)s - %(message)s",
    "detailed": "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s",
}


def setup_logging(level: str = "INFO", format_style: str = "simple") -> None:
    """
    Configure the root logger.
    ----

    level: DEBUG, INFO, WARNING, ERROR or CRITICAL (unknown names fall back to INFO)
    format_style: one of LOG_FORMATS
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    log_format = LOG_FORMATS.get(format_style, LOG_FORMATS["simple"])

    logging.basicConfig(
        level=numeric_level,
        format=log_format,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # uvicorn's access log is noisy with a WebSocket per player
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
