"""Logging for conversion runs.

Every module logs under the ``appsvcgen`` hierarchy (``appsvcgen.converter``,
``appsvcgen.skeleton`` ...). The CLI configures it once per invocation: run
progress and dropped-handler notices go to stderr, so stdout keeps only the
final summary line, and ``--log-file`` keeps a timestamped copy of the run.
"""

from __future__ import annotations

import logging
from pathlib import Path

_ROOT = "appsvcgen"
_CONSOLE_FORMAT = "[appsvcgen] %(levelname)s %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the logger for one pipeline stage, e.g. ``get_logger("emitter")``."""
    return logging.getLogger(f"{_ROOT}.{name}" if name else _ROOT)


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    return handler


def _file_handler(log_file: Path) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(_FILE_FORMAT))
    return handler


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Route conversion logs to stderr and, optionally, ``log_file``.

    ``verbose`` turns on the per-file and per-handler debug records (skipped
    handlers, registered endpoints, truncated blocks). Calling this again
    replaces the previous handlers, which matters when the CLI runs several
    times in one process.
    """
    level = logging.DEBUG if verbose else logging.INFO
    root = logging.getLogger(_ROOT)
    root.setLevel(level)
    root.propagate = False

    for existing in list(root.handlers):
        root.removeHandler(existing)
        existing.close()

    handlers = [_console_handler()]
    if log_file is not None:
        handlers.append(_file_handler(log_file))
    for handler in handlers:
        handler.setLevel(level)
        root.addHandler(handler)

    return root


__all__ = ["configure_logging", "get_logger"]
