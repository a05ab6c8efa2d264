"""Logging setup for the payroll_bridge logger tree."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach one stream handler to the ``payroll_bridge`` logger.

    Safe to call more than once; the handler is only installed the first time.
    """
    root = logging.getLogger("payroll_bridge")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not any(getattr(h, "_payroll_bridge", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._payroll_bridge = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    return root
