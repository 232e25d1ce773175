from __future__ import annotations

import logging

from forum.core.settings import settings

log = logging.getLogger("forum")

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Install a single stream handler on the root logger.

    Safe to call more than once; later calls only adjust the level.
    """
    level_name = (level or settings.log_level or "INFO").strip().upper()
    numeric = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    if getattr(root, "_forum_configured", False):
        root.setLevel(numeric)
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    root.handlers = [handler]
    root.setLevel(numeric)
    setattr(root, "_forum_configured", True)

    # motor/pymongo are chatty at DEBUG
    logging.getLogger("pymongo").setLevel(max(numeric, logging.INFO))
