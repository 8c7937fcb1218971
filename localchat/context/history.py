"""
Session history: the bounded, ordered record of the running conversation,
persisted as alternating ``User:`` / ``AI:`` lines in a single file under a
fixed format header.
"""

import contextlib
import logging
import os
import tempfile
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from ..errors import CorruptHistory, HistoryWriteFailed
from .schema import Role, Utterance

logger = logging.getLogger(__name__)

# First line of files whose utterances are escaped onto one line each.
FORMAT_HEADER = "# localchat history v1"

_LABELS = {role.label: role for role in Role}


def escape_text(text: str) -> str:
    """Fold a (possibly multi-line) text onto a single history line."""
    return text.replace("\\", "\\\\").replace("\r", "\\r").replace("\n", "\\n")


def unescape_text(text: str) -> str:
    out = []
    chars = iter(text)
    for ch in chars:
        if ch != "\\":
            out.append(ch)
            continue
        nxt = next(chars, "")
        if nxt == "n":
            out.append("\n")
        elif nxt == "r":
            out.append("\r")
        elif nxt == "\\":
            out.append("\\")
        else:
            # not one of ours: keep the backslash literally
            out.append("\\" + nxt)
    return "".join(out)


def format_line(utterance: Utterance) -> str:
    return f"{utterance.role.label}: {escape_text(utterance.text)}\n"


def split_line(line: str) -> Tuple[Optional[Role], str]:
    """Split a ``User:``/``AI:`` line into role and raw text; role is None otherwise."""
    label, sep, rest = line.partition(":")
    role = _LABELS.get(label)
    if role is None or not sep:
        return None, line
    if rest.startswith(" "):
        rest = rest[1:]
    return role, rest


@dataclass
class _Entry:
    """One utterance as read from disk, with any continuation lines."""
    line_no: int
    first_line: str
    role: Role
    parts: List[str]

    def to_utterance(self, timestamp: datetime, escaped: bool) -> Utterance:
        parts = list(self.parts)
        while len(parts) > 1 and not parts[-1].strip():
            parts.pop()
        text = "\n".join(parts)
        return Utterance(self.role, unescape_text(text) if escaped else text, timestamp)


class SessionHistory:
    """
    In-memory conversation history backed by a rewritable file.

    Not safe for concurrent mutation; the conversation engine serializes
    every append/persist under its turn lock.
    """

    def __init__(self, path, max_retained: int = 0):
        """
        Args:
            path: location of the history file.
            max_retained: number of utterances kept (oldest evicted first);
                          0 keeps everything. Rounded to whole turns.
        """
        self.path = Path(path)
        self.max_retained = max_retained
        maxlen = None
        if max_retained > 0:
            maxlen = max(2, max_retained - max_retained % 2)
        self._utterances: deque = deque(maxlen=maxlen)

    def __len__(self) -> int:
        return len(self._utterances)

    def __iter__(self) -> Iterator[Utterance]:
        return iter(list(self._utterances))

    @property
    def utterances(self) -> List[Utterance]:
        """The full retained sequence, oldest first."""
        return list(self._utterances)

    def append(self, utterance: Utterance) -> None:
        self._utterances.append(utterance)

    def clear(self) -> None:
        self._utterances.clear()

    def load(self) -> List[Utterance]:
        """
        Replace the in-memory sequence with the contents of the history file.

        A missing file yields an empty history. Files that start with
        ``FORMAT_HEADER`` hold one escaped line per utterance. Files without
        it are plain text as written by earlier versions: a line that is not
        a ``User:``/``AI:`` line continues the utterance above it, and
        backslashes are taken literally.

        An incomplete turn at the end of the file is skipped. Content that
        belongs to no utterance, or a turn out of order, raises
        CorruptHistory when valid turns follow it.
        """
        self._utterances.clear()
        if not self.path.exists():
            logger.info("No session history at %s, starting fresh", self.path)
            return []

        loaded_at = datetime.fromtimestamp(self.path.stat().st_mtime)
        entries, escaped = self._read_entries()

        turns: List[Utterance] = []
        pending: Optional[_Entry] = None
        for index, entry in enumerate(entries):
            last = index == len(entries) - 1
            if entry.role is Role.USER and pending is None:
                pending = entry
            elif entry.role is Role.ASSISTANT and pending is not None:
                turns.append(pending.to_utterance(loaded_at, escaped))
                turns.append(entry.to_utterance(loaded_at, escaped))
                pending = None
            elif entry.role is Role.ASSISTANT and last:
                logger.warning(
                    "Dropping unpaired reply at line %d of %s", entry.line_no, self.path
                )
            else:
                bad = pending or entry
                raise CorruptHistory(str(self.path), bad.line_no, bad.first_line)

        if pending is not None:
            logger.warning(
                "Dropping unanswered user line %d from %s", pending.line_no, self.path
            )

        self._utterances.extend(turns)
        logger.info("Loaded %d utterances from %s", len(self._utterances), self.path)
        return self.utterances

    def _read_entries(self) -> Tuple[List[_Entry], bool]:
        entries: List[_Entry] = []
        stray: Optional[Tuple[int, str]] = None
        escaped = False
        with open(self.path, "r", encoding="utf-8", errors="replace") as f:
            for line_no, raw in enumerate(f, start=1):
                line = raw.rstrip("\r\n")
                if line_no == 1 and line == FORMAT_HEADER:
                    escaped = True
                    continue
                role, text = split_line(line)
                if role is not None:
                    if stray is not None:
                        raise CorruptHistory(str(self.path), *stray)
                    entries.append(_Entry(line_no, line, role, [text]))
                elif entries and not escaped and stray is None:
                    entries[-1].parts.append(line)
                elif line.strip() and stray is None:
                    stray = (line_no, line)

        if stray is not None:
            logger.warning(
                "Dropping unreadable trailing content from %s (line %d)",
                self.path, stray[0],
            )
        return entries, escaped

    def persist(self) -> None:
        """
        Rewrite the history file from memory.

        Written to a temporary file next to the target and moved into place
        with os.replace, so readers see either the old or the new file.
        """
        directory = self.path.parent
        tmp_path = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=directory, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(FORMAT_HEADER + "\n")
                f.writelines(format_line(u) for u in self._utterances)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path is not None:
                with contextlib.suppress(FileNotFoundError):
                    os.unlink(tmp_path)
            raise HistoryWriteFailed(f"Could not write {self.path}: {e}") from e
        logger.debug("Persisted %d utterances to %s", len(self._utterances), self.path)
