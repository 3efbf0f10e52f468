"""
logger.py

Responsibility: Configures process-wide logging for the command-line run.
Does NOT: write log files, rotate logs, or filter messages per module.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(verbose: bool = False) -> None:
    """
    Installs a stderr handler on the root logger, once per process.

    Args:
        verbose: Log at DEBUG (every outbound request) instead of INFO.
    """
    root = logging.getLogger()
    if not any(getattr(h, "_ddns_handler", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        handler._ddns_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)

    # httpx logs every request at INFO; keep it for --verbose only.
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)
