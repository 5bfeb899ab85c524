"""Import raw records from a Playnite library export.

Playnite aggregates launchers (Epic, GOG, Xbox app, ...) into one JSON
export. Only Epic, GOG and Xbox (including Game Pass) entries are taken;
Steam games come from the Steam fetcher with better data.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from gamekeeper.records import RawRecord, parse_timestamp
from gamekeeper.sources import Source

logger = logging.getLogger(__name__)

IMPORTED_SOURCES = frozenset({Source.EPIC, Source.GOG, Source.XBOX, Source.GAMEPASS})

SECONDS_PER_HOUR = 3600


def map_playnite_source(name: str | None) -> Source:
    """Map a Playnite library name ("Epic", "Xbox", "Microsoft Store", ...) to a Source."""
    if not name:
        return Source.MANUAL
    lowered = name.lower()
    if "steam" in lowered:
        return Source.STEAM
    if "epic" in lowered:
        return Source.EPIC
    if "gog" in lowered:
        return Source.GOG
    if "gamepass" in lowered or "game pass" in lowered:
        return Source.GAMEPASS
    if "xbox" in lowered or "microsoft" in lowered:
        return Source.XBOX
    return Source.MANUAL


def playnite_game_to_record(game: dict, source: Source) -> RawRecord:
    """Convert one entry of the export's ``Games`` array.

    Some Playnite plugins store a Steam AppID in ``SourceId`` even for
    non-Steam games; an all-digit positive SourceId is kept as the native ID.
    """
    playtime_seconds = game.get("Playtime") or 0
    hours = playtime_seconds / SECONDS_PER_HOUR if playtime_seconds > 0 else None

    native_id = None
    source_id = str(game.get("SourceId") or "")
    if source_id.isdigit() and int(source_id) > 0:
        native_id = int(source_id)

    genres = game.get("Genres")
    return RawRecord(
        source=source,
        external_id=str(game["GameId"]),
        title=game["Name"],
        native_numeric_id=native_id,
        hours_played=hours,
        last_played_at=parse_timestamp(game.get("LastActivity")),
        cover_image_url=game.get("CoverImage"),
        release_date=parse_timestamp(game.get("ReleaseDate")),
        genres=tuple(genre["Name"] for genre in genres) if genres else None,
    )


def load_playnite_export(path: Path) -> list[RawRecord]:
    """Load Epic, GOG, Xbox and Game Pass records from a Playnite JSON export.

    Returns an empty list if the file doesn't exist.

    Raises:
        ValueError: if the file has no ``Games`` array.
    """
    if not path.exists():
        logger.warning("Playnite export file not found: %s", path)
        return []

    logger.info("Loading Playnite snapshot from %s", path)
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    games = data.get("Games") if isinstance(data, dict) else None
    if not isinstance(games, list):
        raise ValueError(f"Invalid Playnite export format: missing Games array in {path}")

    records = []
    breakdown: dict[str, int] = {}
    for game in games:
        source = map_playnite_source(game.get("Source"))
        if source not in IMPORTED_SOURCES:
            continue
        records.append(playnite_game_to_record(game, source))
        breakdown[source.value] = breakdown.get(source.value, 0) + 1

    logger.info(
        "Processed %d of %d Playnite games (%s)",
        len(records),
        len(games),
        ", ".join(f"{name}={count}" for name, count in sorted(breakdown.items())),
    )
    return records
