from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s — %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Send all records to stdout; uvicorn is run with log_config=None so it shares this setup."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stdout,
    )
    for _noisy in ("sqlalchemy.engine", "httpx", "httpcore", "multipart"):
        logging.getLogger(_noisy).setLevel(logging.WARNING)
