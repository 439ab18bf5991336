"""
tripcore — deterministic itinerary scheduling and recommendation engine.

Pure functions over plain records: placement, curation, alternatives,
travel-time and custom-event conflicts, preference inference. No I/O.
"""

import logging

from tripcore import config

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())


def configure_logging(level: str | None = None) -> None:
    """Attach a stderr handler to the ``tripcore`` logger at *level* (default config.LOG_LEVEL)."""
    logger = logging.getLogger(__name__)
    logger.setLevel((level or config.LOG_LEVEL).upper())
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)


__all__ = ["config", "configure_logging", "__version__"]
