"""Logging setup shared by the CLI, the service and the pipeline modules."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "tapgen"
_CONSOLE_FORMAT = "[%(component)s] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class _ComponentFilter(logging.Filter):
    """Expose ``tapgen.archive`` as ``component='archive'`` for the console."""

    def filter(self, record: logging.LogRecord) -> bool:
        prefix = _LOGGER_NAME + "."
        if record.name.startswith(prefix):
            record.component = record.name[len(prefix):]
        else:
            record.component = record.name
        return True


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``tapgen.<name>``, or the package logger when ``name`` is empty."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Attach console (and optional file) handlers to the ``tapgen`` logger.

    Verbose mode shows DEBUG records such as checksum-manifest lookups and
    per-archive member counts.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # The service and repeated CLI calls in one process must not stack handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.addFilter(_ComponentFilter())
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(level)
        sink.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(sink)

    return logger


__all__ = ["configure_logging", "get_logger"]
