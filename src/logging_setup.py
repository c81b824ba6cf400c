"""
Logging setup for AI Trends.

Pipeline modules log through ``logging.getLogger(__name__)``; this module
configures the root logger once from the ``logging`` config section.
"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(config: dict | None = None) -> None:
    """Configure root logging from config (``logging.level``)."""
    level_name = str(((config or {}).get("logging") or {}).get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))
