"""Logging utilities for notespub commands."""

from __future__ import annotations

import logging
import os
from pathlib import Path

_LOGGER_NAME = "notespub"

_ANNOTATION_LEVELS = {
    logging.WARNING: "warning",
    logging.ERROR: "error",
    logging.CRITICAL: "error",
}


class ActionsFormatter(logging.Formatter):
    """Renders warnings and errors as GitHub Actions workflow annotations."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        command = _ANNOTATION_LEVELS.get(record.levelno)
        if command is None:
            return message
        # Workflow commands are single-line; encode newlines as the runner expects.
        escaped = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
        return f"::{command}::{escaped}"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the notespub hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Path | None = None,
    annotations: bool | None = None,
) -> logging.Logger:
    """Configure the notespub logger with console output and an optional file sink.

    ``annotations`` defaults to on when running inside GitHub Actions.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if annotations is None:
        annotations = os.environ.get("GITHUB_ACTIONS") == "true"

    console_format = "[notespub] %(levelname)s %(message)s"
    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(
        ActionsFormatter("%(message)s") if annotations else logging.Formatter(console_format)
    )
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["ActionsFormatter", "configure_logging", "get_logger"]
