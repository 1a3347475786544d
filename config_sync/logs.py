"""Logging setup: stderr for the user, an append-only file for history."""

from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_HANDLER_ATTR = "_config_sync_handler"


def setup_logging(log_file: Path | None = None, verbose: bool = False) -> None:
    """Configure the ``config_sync`` logger.

    The file handler always records INFO and above so the log keeps a trail of
    every run; the console shows warnings, or everything with ``verbose``.
    """
    root = logging.getLogger("config_sync")
    root.setLevel(logging.DEBUG)

    # Replace handlers from a previous call (tests invoke the CLI repeatedly)
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_ATTR, False):
            root.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler()
    if verbose:
        console.setLevel(logging.DEBUG)
    else:
        console.setLevel(logging.WARNING)
    console.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    setattr(console, _HANDLER_ATTR, True)
    root.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(formatter)
        setattr(file_handler, _HANDLER_ATTR, True)
        root.addHandler(file_handler)
