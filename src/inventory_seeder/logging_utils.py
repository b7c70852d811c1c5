from __future__ import annotations

import logging
import sys
from typing import Literal


def setup_logging(level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO") -> None:
    """
    Configure a simple, consistent console logger for the seeder.
    """
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    # pymongo and openai are chatty at DEBUG
    for noisy in ("pymongo", "httpx", "openai"):
        logging.getLogger(noisy).setLevel(max(logging.getLogger().level, logging.WARNING))
