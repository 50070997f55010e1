# ABOUTME: Append-only ledger of generated EPUBs, one plaintext line per generation.
# ABOUTME: Each line is written in a single append so concurrent writers never split a line.

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

_LINE_RE = re.compile(r"^\[(?P<timestamp>[^\]]+)\] ISBN: (?P<isbn>.*?), Title: (?P<title>.*)$")


@dataclass(frozen=True)
class LedgerEntry:
    """One recorded generation."""

    timestamp: datetime
    isbn: str
    title: str


class Ledger:
    """The processed-ISBN list: ``[timestamp] ISBN: X, Title: Y`` per line."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def record(self, isbn: str, title: str, *, now: datetime | None = None) -> LedgerEntry:
        """Append one line for a successful generation."""
        stamp = (now or datetime.now()).replace(microsecond=0)
        # Newlines would break the one-entry-per-line format.
        isbn = " ".join(isbn.split())
        title = " ".join(title.split())
        line = f"[{stamp.strftime(TIMESTAMP_FORMAT)}] ISBN: {isbn}, Title: {title}\n"
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("a", encoding="utf-8") as fh:
            fh.write(line)
        logger.info("Recorded ISBN %s in %s", isbn, self._path)
        return LedgerEntry(timestamp=stamp, isbn=isbn, title=title)

    def entries(self) -> list[LedgerEntry]:
        """Parse every well-formed line, oldest first. Malformed lines are skipped."""
        if not self._path.exists():
            return []

        entries: list[LedgerEntry] = []
        for line in self._path.read_text(encoding="utf-8").splitlines():
            match = _LINE_RE.match(line)
            if not match:
                continue
            try:
                timestamp = datetime.strptime(match["timestamp"], TIMESTAMP_FORMAT)
            except ValueError:
                continue
            entries.append(LedgerEntry(timestamp=timestamp, isbn=match["isbn"], title=match["title"]))
        return entries
