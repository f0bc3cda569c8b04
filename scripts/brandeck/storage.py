"""Filesystem housekeeping for generated decks.

All decks live flat in one output directory. Names coming from callers
are checked before any path is built, so only plain ``*.pptx`` names inside
that directory can be served or deleted.
"""

from __future__ import annotations

import re
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional, Union

from loguru import logger

from .errors import DeckNotFound, InvalidFilename

SUFFIX = ".pptx"
SECONDS_PER_DAY = 24 * 60 * 60

_UNSAFE = re.compile(r"[^A-Za-z0-9_]+")


def sanitize(value: str) -> str:
    """Collapse anything outside ``[A-Za-z0-9_]`` into single underscores."""
    cleaned = _UNSAFE.sub("_", value or "").strip("_")
    return cleaned or "deck"


def make_filename(brand: str, organisation: str, *, now: Optional[datetime] = None, token: Optional[str] = None) -> str:
    """``<brand>_<organisation>_<UTC timestamp>_<token>.pptx``."""
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%dT%H%M%SZ")
    token = token or uuid.uuid4().hex[:8]
    return f"{sanitize(brand)}_{sanitize(organisation)}_{stamp}_{token}{SUFFIX}"


def check_filename(filename: str) -> str:
    name = str(filename or "")
    if not name or "/" in name or "\\" in name or ".." in name:
        raise InvalidFilename(f"Invalid filename: {name!r}")
    if not name.endswith(SUFFIX) or name.startswith("."):
        raise InvalidFilename(f"Invalid filename: {name!r} (expected a {SUFFIX} file)")
    return name


@dataclass(frozen=True)
class DeckFile:
    filename: str
    size: int
    created: datetime
    modified: datetime

    def as_dict(self, url_prefix: str = "") -> dict:
        return {
            "filename": self.filename,
            "size": self.size,
            "created": self.created.isoformat(),
            "modified": self.modified.isoformat(),
            "downloadUrl": f"{url_prefix}/download/{self.filename}",
        }


def _stamp(seconds: float) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


class DeckStore:
    def __init__(self, root: Union[str, Path], *, clock: Callable[[], float] = time.time):
        self.root = Path(root)
        self.clock = clock

    def ensure(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def _files(self) -> list[Path]:
        if not self.root.is_dir():
            return []
        return [p for p in self.root.iterdir() if p.is_file() and p.name.endswith(SUFFIX) and not p.name.startswith(".")]

    def path_for(self, filename: str) -> Path:
        path = self.root / check_filename(filename)
        if not path.is_file():
            raise DeckNotFound(f"Presentation not found: {filename}")
        return path

    def stat(self, filename: str) -> DeckFile:
        st = self.path_for(filename).stat()
        return DeckFile(filename, st.st_size, _stamp(st.st_ctime), _stamp(st.st_mtime))

    def list(self) -> list[DeckFile]:
        """All decks, newest modification first."""
        entries = []
        for path in self._files():
            try:
                st = path.stat()
            except FileNotFoundError:
                continue
            entries.append(DeckFile(path.name, st.st_size, _stamp(st.st_ctime), _stamp(st.st_mtime)))
        entries.sort(key=lambda e: e.modified, reverse=True)
        return entries

    def count(self) -> int:
        return len(self._files())

    def delete(self, filename: str) -> None:
        path = self.path_for(filename)
        path.unlink()
        logger.info("Deleted {name}", name=filename)

    def cleanup(self, max_age_days: float = 7) -> int:
        """Delete decks whose modification time is older than *max_age_days*."""
        if max_age_days < 0:
            raise ValueError(f"max_age_days must be >= 0, got {max_age_days}")
        cutoff = self.clock() - max_age_days * SECONDS_PER_DAY
        deleted = 0
        for path in self._files():
            try:
                expired = path.stat().st_mtime < cutoff
            except FileNotFoundError:
                continue
            if expired:
                path.unlink(missing_ok=True)
                deleted += 1
        logger.info("Cleanup removed {n} decks older than {days} days", n=deleted, days=max_age_days)
        return deleted
