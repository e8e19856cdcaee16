"""Appending received game logs to disk."""

from __future__ import annotations

import logging
import os
import time
from datetime import datetime

from peril.routing import GameLog

LOGS_FILE = "game.log"
WRITE_TO_DISK_SLEEP = 1.0

logger = logging.getLogger(__name__)


def _rfc3339(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.astimezone()
    text = moment.replace(microsecond=0).isoformat()
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


def write_log(gamelog: GameLog, path: str | os.PathLike[str] = LOGS_FILE) -> None:
    """Append one game log line to ``path``, after a deliberate delay."""
    logger.info("received game log...")
    time.sleep(WRITE_TO_DISK_SLEEP)
    line = f"{_rfc3339(gamelog.current_time)} {gamelog.username}: {gamelog.message}\n"
    with open(path, "a", encoding="utf-8", newline="") as handle:
        handle.write(line)