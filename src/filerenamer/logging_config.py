from __future__ import annotations

import logging

from filerenamer.settings import LOG_LEVEL

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the process."""

    resolved = (level or LOG_LEVEL or "INFO").upper()
    logging.basicConfig(level=getattr(logging, resolved, logging.INFO), format=_LOG_FORMAT)
