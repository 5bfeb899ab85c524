"""Source platforms and the priority order used for every merge tie-break."""

from __future__ import annotations

import enum


class Source(enum.Enum):
    """Platform a game observation came from."""

    STEAM = "steam"
    XBOX = "xbox"
    EPIC = "epic"
    GOG = "gog"
    AMAZON = "amazon"
    GAMEPASS = "gamepass"
    MANUAL = "manual"


SOURCE_PRIORITY: dict[Source, int] = {
    Source.STEAM: 1,
    Source.XBOX: 2,
    Source.EPIC: 3,
    Source.GOG: 4,
    Source.AMAZON: 5,
    Source.GAMEPASS: 6,
    Source.MANUAL: 7,
}
"""Lower rank = higher priority. Must rank every Source exactly once."""

# Owning a title on this platform supersedes subscription availability.
OWNED_PLATFORM = Source.XBOX
SUBSCRIPTION = Source.GAMEPASS

# native_numeric_id values live in this storefront's ID space.
NATIVE_ID_SOURCE = Source.STEAM


def validate_priority_table(table: dict[Source, int]) -> None:
    """Raise ValueError unless the table is a total order over Source."""
    missing = [source.value for source in Source if source not in table]
    if missing:
        raise ValueError(f"Source priority table is missing: {', '.join(missing)}")
    ranks = list(table.values())
    if len(set(ranks)) != len(ranks):
        raise ValueError(f"Source priority table has tied ranks: {sorted(ranks)}")


validate_priority_table(SOURCE_PRIORITY)


def priority(source: Source) -> int:
    """Return the priority rank of a source (1 = highest)."""
    return SOURCE_PRIORITY[source]


def parse_source(tag: str) -> Source:
    """Map a wire tag like "steam" to its Source.

    Raises:
        ValueError: if the tag names no known source.
    """
    try:
        return Source(tag.strip().lower())
    except ValueError:
        raise ValueError(f"Unknown source tag {tag!r}") from None
