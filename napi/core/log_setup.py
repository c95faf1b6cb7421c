"""
Logging setup

Appends to a log file (created if missing) and mirrors to the console.
Every record carries a timestamp.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(log_file: Optional[str] = "serve.log", level: str = "INFO") -> None:
    """Configure root logging for the server process.

    Args:
        log_file: File to append to; None logs to the console only
        level: Logging level name
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.insert(0, logging.FileHandler(log_file, mode="a", encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )

    logging.getLogger(__name__).info(
        f"Server started at: {datetime.now(timezone.utc).isoformat()}"
    )
