# src/lead_takip/logs.py
from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

load_dotenv()

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Root logger for UI and CLI entry points (level from LEADS_LOG_LEVEL)."""
    level = (level or os.getenv("LEADS_LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)
    # Streamlit reruns the script on every interaction; keep chatty libs quiet
    for noisy in ("httpx", "openai", "matplotlib", "PIL"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
