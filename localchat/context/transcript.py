"""
Append-only daily transcript logs.

Each exchange becomes two human-readable lines in
``<log_dir>/<prefix><YYYY-mm-dd>.txt``:

    [2024-05-01 14:03:22] User: hi
    [2024-05-01 14:03:22] AI: hello
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable

from ..errors import LogWriteFailed
from .history import escape_text

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class TranscriptStore:
    """Write-only audit log of every exchange, one file per calendar day."""

    def __init__(
        self,
        log_dir,
        prefix: str = "chat_log_",
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.log_dir = Path(log_dir)
        self.prefix = prefix
        self._clock = clock

    def path_for(self, moment: datetime) -> Path:
        return self.log_dir / f"{self.prefix}{moment.date().isoformat()}.txt"

    def append(self, user_text: str, assistant_text: str) -> Path:
        """Append one exchange to today's log. Raises LogWriteFailed on I/O errors."""
        now = self._clock()
        stamp = now.strftime(TIMESTAMP_FORMAT)
        path = self.path_for(now)
        record = (
            f"[{stamp}] User: {escape_text(user_text)}\n"
            f"[{stamp}] AI: {escape_text(assistant_text)}\n"
        )
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            with open(path, "a", encoding="utf-8") as f:
                f.write(record)
        except OSError as e:
            raise LogWriteFailed(f"Could not append to {path}: {e}") from e
        return path
