"""Logging setup for the application."""

import logging

from achievehub.config import settings

_configured = False


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger once; later calls only adjust the level."""
    global _configured
    level_name = (level or settings.LOG_LEVEL).upper()
    if not _configured:
        logging.basicConfig(
            level=level_name,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )
        _configured = True
    logging.getLogger().setLevel(level_name)
