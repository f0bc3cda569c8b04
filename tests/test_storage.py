from __future__ import annotations

import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

SCRIPT_DIR = Path(__file__).resolve().parents[1] / "scripts"
if str(SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPT_DIR))

from brandeck.errors import DeckNotFound, InvalidFilename  # noqa: E402
from brandeck.storage import SECONDS_PER_DAY, DeckStore, check_filename, make_filename, sanitize  # noqa: E402

NOW = 1_800_000_000.0


def _touch(directory: Path, name: str, *, age_days: float = 0.0, content: bytes = b"PK") -> Path:
    path = directory / name
    path.write_bytes(content)
    stamp = NOW - age_days * SECONDS_PER_DAY
    os.utime(path, (stamp, stamp))
    return path


def test_sanitize() -> None:
    assert sanitize("Acme & Sons Ltd.") == "Acme_Sons_Ltd"
    assert sanitize("  ") == "deck"
    assert sanitize("") == "deck"
    assert sanitize("Café 2026") == "Caf_2026"


def test_make_filename_format() -> None:
    now = datetime(2026, 3, 1, 9, 30, 5, tzinfo=timezone.utc)
    name = make_filename("investment", "North Star Capital", now=now, token="deadbeef")
    assert name == "investment_North_Star_Capital_20260301T093005Z_deadbeef.pptx"


def test_make_filename_is_unique_per_call() -> None:
    now = datetime(2026, 3, 1, tzinfo=timezone.utc)
    assert make_filename("corporate", "Acme", now=now) != make_filename("corporate", "Acme", now=now)


@pytest.mark.parametrize(
    "name",
    ["", "../secret.pptx", "a/b.pptx", "a\\b.pptx", "..evil.pptx", "notes.txt", ".hidden.pptx"],
)
def test_check_filename_rejects_unsafe_names(name: str) -> None:
    with pytest.raises(InvalidFilename):
        check_filename(name)


def test_check_filename_accepts_plain_pptx() -> None:
    assert check_filename("corporate_Acme_20260301T000000Z_abcd1234.pptx").endswith(".pptx")


def test_path_for_missing_deck(tmp_path: Path) -> None:
    store = DeckStore(tmp_path)
    with pytest.raises(DeckNotFound):
        store.path_for("missing.pptx")
    with pytest.raises(DeckNotFound):
        store.delete("missing.pptx")


def test_list_is_newest_first_and_ignores_other_files(tmp_path: Path) -> None:
    _touch(tmp_path, "old.pptx", age_days=3)
    _touch(tmp_path, "new.pptx", age_days=1)
    _touch(tmp_path, "notes.txt")
    _touch(tmp_path, ".new.pptx.1234.tmp")
    _touch(tmp_path, ".hidden.pptx")

    store = DeckStore(tmp_path)
    assert [entry.filename for entry in store.list()] == ["new.pptx", "old.pptx"]
    assert store.count() == 2

    entry = store.stat("old.pptx")
    assert entry.size == 2
    assert entry.as_dict("/api/presentations")["downloadUrl"] == "/api/presentations/download/old.pptx"


def test_list_on_missing_directory(tmp_path: Path) -> None:
    store = DeckStore(tmp_path / "nowhere")
    assert store.list() == []
    assert store.count() == 0
    assert store.ensure().is_dir()


def test_cleanup_deletes_only_old_decks(tmp_path: Path) -> None:
    _touch(tmp_path, "ancient.pptx", age_days=10)
    _touch(tmp_path, "week_old.pptx", age_days=8)
    _touch(tmp_path, "fresh.pptx", age_days=1)
    _touch(tmp_path, "ancient.txt", age_days=30)

    store = DeckStore(tmp_path, clock=lambda: NOW)
    assert store.cleanup(7) == 2

    remaining = sorted(p.name for p in tmp_path.iterdir())
    assert remaining == ["ancient.txt", "fresh.pptx"]


def test_cleanup_with_zero_days_removes_everything_older_than_now(tmp_path: Path) -> None:
    _touch(tmp_path, "a.pptx", age_days=0.5)
    store = DeckStore(tmp_path, clock=lambda: NOW)
    assert store.cleanup(0) == 1
    assert store.count() == 0


def test_cleanup_rejects_negative_age(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        DeckStore(tmp_path).cleanup(-1)


def test_delete_removes_file(tmp_path: Path) -> None:
    _touch(tmp_path, "deck.pptx")
    store = DeckStore(tmp_path)
    store.delete("deck.pptx")
    assert not (tmp_path / "deck.pptx").exists()


class _VanishingStore(DeckStore):
    """Lists one deck that another request deletes before it is stat-ed."""

    def _files(self) -> list[Path]:
        return super()._files() + [self.root / "vanished.pptx"]


def test_list_and_cleanup_skip_decks_deleted_concurrently(tmp_path: Path) -> None:
    _touch(tmp_path, "kept.pptx", age_days=1)
    _touch(tmp_path, "stale.pptx", age_days=10)
    store = _VanishingStore(tmp_path, clock=lambda: NOW)

    assert [entry.filename for entry in store.list()] == ["kept.pptx", "stale.pptx"]
    assert store.cleanup(7) == 1
    assert sorted(p.name for p in tmp_path.iterdir()) == ["kept.pptx"]
