"""Logging for bundled-components.

Console output carries the ``[bundled-components]`` prefix the build host
shows next to its own messages. A log file, when requested, always records
the full debug trace (paths, used and needed sets, bundle sizes) so a quiet
console build can still be diagnosed afterwards.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

ROOT_LOGGER = "bundled_components"
CONSOLE_FORMAT = "[bundled-components] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# Marks handlers installed here so reconfiguring leaves foreign handlers alone.
_OWNED = "_bundled_components_handler"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return ``bundled_components.<name>``, or the package logger itself."""
    if not name:
        return logging.getLogger(ROOT_LOGGER)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def configure_logging(*, verbose: bool = False, log_file: Optional[Path] = None) -> logging.Logger:
    """Install console (and optional file) handlers on the package logger."""
    logger = logging.getLogger(ROOT_LOGGER)
    _remove_owned_handlers(logger)

    console_level = logging.DEBUG if verbose else logging.INFO
    console = logging.StreamHandler()
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    _own(logger, console)

    logger_level = console_level
    if log_file is not None:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        sink = logging.FileHandler(path, encoding="utf-8")
        sink.setLevel(logging.DEBUG)
        sink.setFormatter(logging.Formatter(FILE_FORMAT))
        _own(logger, sink)
        logger_level = logging.DEBUG

    logger.setLevel(logger_level)
    logger.propagate = False
    return logger


def _own(logger: logging.Logger, handler: logging.Handler) -> None:
    setattr(handler, _OWNED, True)
    logger.addHandler(handler)


def _remove_owned_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        if getattr(handler, _OWNED, False):
            logger.removeHandler(handler)
            handler.close()


__all__ = ["configure_logging", "get_logger"]
