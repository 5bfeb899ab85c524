"""Collapse grouped raw records into canonical library entries.

Metadata comes from the highest-priority contributor; playtime is summed
and last-played is the latest across all contributors.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from gamekeeper.grouping import group, native_id_key
from gamekeeper.normalize import slugify
from gamekeeper.overrides import ForceMergeRule, resolve_forced_merge
from gamekeeper.records import CanonicalRecord, RawRecord
from gamekeeper.sources import OWNED_PLATFORM, SUBSCRIPTION, Source, priority

logger = logging.getLogger(__name__)


class EmptyGroupError(ValueError):
    """Raised when asked to merge a group with no records."""


def owned_sources(contributors: Sequence[RawRecord]) -> tuple[Source, ...]:
    """Distinct contributing sources in priority order.

    Owning a title on the platform makes its subscription tag redundant, so
    the subscription source is dropped whenever the owned platform is present.
    """
    sources = sorted({record.source for record in contributors}, key=priority)
    if OWNED_PLATFORM in sources:
        sources = [source for source in sources if source != SUBSCRIPTION]
    return tuple(sources)


def merge(
    contributors: Sequence[RawRecord],
    rules: Sequence[ForceMergeRule] = (),
) -> CanonicalRecord:
    """Merge one group of records into a single canonical record.

    The canonical-name substitution only consults the first two contributors
    (in input order). A forced-merge name is not applied to larger groups
    whose first two records fall outside the rule.

    Raises:
        EmptyGroupError: if ``contributors`` is empty.
    """
    if not contributors:
        raise EmptyGroupError("Cannot merge empty game group")

    ranked = sorted(contributors, key=lambda record: priority(record.source))
    primary = ranked[0]

    native_id = next(
        (r.native_numeric_id for r in ranked if r.native_numeric_id is not None),
        None,
    )
    canonical_id = native_id_key(native_id) if native_id is not None else slugify(primary.title)

    total_hours = sum(record.hours_played or 0 for record in contributors)

    played_dates = [r.last_played_at for r in contributors if r.last_played_at is not None]
    last_played_at = max(played_dates) if played_dates else None

    title = primary.title
    if len(contributors) > 1:
        canonical_name = resolve_forced_merge(contributors[0].title, contributors[1].title, rules)
        if canonical_name and canonical_name != primary.title:
            logger.debug("Applying canonical name %r (was %r)", canonical_name, primary.title)
            title = canonical_name

    return CanonicalRecord(
        canonical_id=canonical_id,
        title=title,
        primary_source=primary.source,
        owned_sources=owned_sources(contributors),
        native_numeric_id=native_id,
        total_hours=total_hours if total_hours > 0 else None,
        last_played_at=last_played_at,
        cover_image_url=primary.cover_image_url,
        release_date=primary.release_date,
        genres=primary.genres,
    )


def process_raw_records(
    records: Sequence[RawRecord],
    rules: Sequence[ForceMergeRule] = (),
) -> list[CanonicalRecord]:
    """Deduplicate raw records from all sources into canonical records."""
    logger.info("Processing %d raw records...", len(records))
    groups = group(records, rules)
    logger.info("Deduplicated into %d unique games", len(groups))

    canonical = []
    for contributors in groups.values():
        merged = merge(contributors, rules)
        canonical.append(merged)

        sources = {record.source for record in contributors}
        if len(sources) > 1:
            logger.info(
                "Merged %r from sources: %s",
                merged.title,
                ", ".join(s.value for s in sorted(sources, key=priority)),
            )
    return canonical


def source_breakdown(records: Sequence[CanonicalRecord]) -> dict[str, int]:
    """Count canonical records per primary source, in priority order."""
    breakdown: dict[str, int] = {}
    for record in sorted(records, key=lambda r: priority(r.primary_source)):
        key = record.primary_source.value
        breakdown[key] = breakdown.get(key, 0) + 1
    return breakdown
