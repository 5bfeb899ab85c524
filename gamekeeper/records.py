"""Game records: raw per-source observations and merged canonical entries.

Snapshot JSON uses camelCase keys (``externalId``, ``playtimeHours``, ...)
because that is what the platform fetchers write. Older snapshots name the
title ``name`` and the native ID ``steamAppId``; both spellings are accepted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from gamekeeper.sources import Source, parse_source


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """Parse an ISO-8601 timestamp, accepting a trailing ``Z`` for UTC.

    Always returns an aware datetime; a value without an offset is taken as
    UTC so timestamps from different snapshots stay comparable.
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _first_present(data: dict, *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


@dataclass(frozen=True)
class RawRecord:
    """One observation of a game from one source."""

    source: Source
    external_id: str
    title: str
    native_numeric_id: int | None = None
    hours_played: float | None = None
    last_played_at: datetime | None = None
    cover_image_url: str | None = None
    release_date: datetime | None = None
    genres: tuple[str, ...] | None = None

    def __post_init__(self) -> None:
        if self.hours_played is not None and self.hours_played < 0:
            raise ValueError(
                f"hours_played must be non-negative, got {self.hours_played!r} "
                f"for {self.title!r}"
            )
        if self.genres is not None and not isinstance(self.genres, tuple):
            object.__setattr__(self, "genres", tuple(self.genres))
        for name in ("last_played_at", "release_date"):
            object.__setattr__(self, name, parse_timestamp(getattr(self, name)))

    @classmethod
    def from_dict(cls, data: dict) -> RawRecord:
        """Build a record from its snapshot JSON form."""
        native_id = _first_present(data, "nativeNumericId", "steamAppId")
        hours = _first_present(data, "hoursPlayed", "playtimeHours")
        genres = data.get("genres")
        return cls(
            source=parse_source(data["source"]),
            external_id=str(data.get("externalId", "")),
            title=_first_present(data, "title", "name") or "",
            native_numeric_id=int(native_id) if native_id is not None else None,
            hours_played=float(hours) if hours is not None else None,
            last_played_at=parse_timestamp(data.get("lastPlayedAt")),
            cover_image_url=data.get("coverImageUrl"),
            release_date=parse_timestamp(data.get("releaseDate")),
            genres=tuple(genres) if genres is not None else None,
        )

    def to_dict(self) -> dict:
        return {
            "source": self.source.value,
            "externalId": self.external_id,
            "title": self.title,
            "nativeNumericId": self.native_numeric_id,
            "hoursPlayed": self.hours_played,
            "lastPlayedAt": format_timestamp(self.last_played_at),
            "coverImageUrl": self.cover_image_url,
            "releaseDate": format_timestamp(self.release_date),
            "genres": list(self.genres) if self.genres is not None else None,
        }


@dataclass(frozen=True)
class CanonicalRecord:
    """The deduplicated, merged representation of one logical game.

    Attributes:
        canonical_id: ``steam:<id>`` when a contributor has a native ID,
            otherwise a slug of the normalized title.
        owned_sources: Contributing sources in priority order, with the
            subscription tag dropped when the title is owned outright.
        total_hours: Summed playtime; None rather than 0.
        extra: Property-override values that have no dedicated field.
    """

    canonical_id: str
    title: str
    primary_source: Source
    owned_sources: tuple[Source, ...]
    native_numeric_id: int | None = None
    total_hours: float | None = None
    last_played_at: datetime | None = None
    cover_image_url: str | None = None
    release_date: datetime | None = None
    genres: tuple[str, ...] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        data = {
            "canonicalId": self.canonical_id,
            "title": self.title,
            "primarySource": self.primary_source.value,
            "ownedSources": [source.value for source in self.owned_sources],
            "nativeNumericId": self.native_numeric_id,
            "totalHours": self.total_hours,
            "lastPlayedAt": format_timestamp(self.last_played_at),
            "coverImageUrl": self.cover_image_url,
            "releaseDate": format_timestamp(self.release_date),
            "genres": list(self.genres) if self.genres is not None else None,
        }
        data.update(self.extra)
        return data
