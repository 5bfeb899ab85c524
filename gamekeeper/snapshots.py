"""Load collaborator snapshots (JSON files) into plain in-memory values.

Fetchers for each platform write their results to JSON; reconciliation only
ever reads these files, once, before any matching starts.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from gamekeeper.normalize import normalize
from gamekeeper.records import CanonicalRecord, RawRecord, format_timestamp
from gamekeeper.subscription import CatalogEntry

logger = logging.getLogger(__name__)

OWNED_GAMES_KEY = "ownedGames"
INTERESTS_KEY = "wantToPlay"


def default_data_dir() -> Path:
    """Directory holding the snapshot files, from GAMEKEEPER_DATA_DIR (default: data)."""
    return Path(os.environ.get("GAMEKEEPER_DATA_DIR", "data"))


def load_title_set(path: Path, key: str) -> set[str]:
    """Load a list of titles stored under ``key`` and normalize them.

    Used for the owned list (``ownedGames``) and the interest list
    (``wantToPlay``). Returns an empty set if the file doesn't exist.
    """
    if not path.exists():
        logger.warning("Could not find %s, using empty set", path)
        return set()
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    titles = {normalize(title) for title in data.get(key) or []}
    logger.info("Loaded %d titles from %s", len(titles), path)
    return titles


def load_catalog(path: Path) -> list[CatalogEntry]:
    """Load a cached subscription catalog.

    Expects ``{"lastUpdated": ..., "games": [{"id", "title", "available"}]}``.

    Raises:
        FileNotFoundError: if the catalog file doesn't exist. Without a
            catalog every title would look like it left, so the caller has
            to decide what to do.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    entries = [
        CatalogEntry(
            id=str(game["id"]),
            title=game["title"],
            available=bool(game.get("available", True)),
        )
        for game in data.get("games") or []
    ]
    logger.info(
        "Loaded catalog: %d titles (%d available), last updated %s",
        len(entries),
        sum(1 for entry in entries if entry.available),
        data.get("lastUpdated", "unknown"),
    )
    return entries


def load_raw_records(path: Path) -> list[RawRecord]:
    """Load raw records written by a platform fetcher.

    Accepts a bare JSON list or ``{"games": [...]}``. Returns an empty list if
    the file doesn't exist.
    """
    if not path.exists():
        logger.warning("Records snapshot not found: %s", path)
        return []
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("games") or []
    records = [RawRecord.from_dict(item) for item in data]
    logger.info("Loaded %d records from %s", len(records), path)
    return records


def write_library(
    path: Path,
    records: Sequence[CanonicalRecord],
    generated_at: datetime | None = None,
) -> None:
    """Write the canonical library to JSON atomically (write .tmp, then rename)."""
    data = {
        "generatedAt": format_timestamp(generated_at),
        "totalGames": len(records),
        "games": [record.to_dict() for record in records],
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(".tmp")
    tmp_path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    tmp_path.replace(path)
    logger.info("Wrote %d games to %s", len(records), path)
