"""Subscription (Game Pass) eligibility policy.

Decides, per Xbox/Game Pass title, whether it is synced as owned, synced as
subscription-available, or withheld and written to the unavailable report.
Every run starts from fresh snapshots: the owned list, the want-to-play
interest list, the live catalog, and the previous run's unavailable report.

States, evaluated in order for each title:

  - NOT_SUBSCRIPTION: from any other platform. Synced untouched.
  - OWNED: in the owned list. Synced, tagged xbox, never tagged gamepass.
  - SUBSCRIPTION_ELIGIBLE: in the live catalog. Synced, tagged gamepass.
  - PLAYED_LEFT_CATALOG: played under Xbox/Game Pass, not owned, gone from
    the catalog. Withheld; reported as "left-catalog" with was_played.
  - SUBSCRIPTION_INELIGIBLE: wanted but not in the catalog. Withheld;
    reported as "interest-unavailable".

A title from the previous report that is back in the catalog is "returned":
listed for the user and not carried into the new report.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime

from gamekeeper.normalize import normalize
from gamekeeper.records import RawRecord
from gamekeeper.sources import OWNED_PLATFORM, SUBSCRIPTION, Source

logger = logging.getLogger(__name__)

SUBSCRIPTION_SOURCES = frozenset({OWNED_PLATFORM, SUBSCRIPTION})


class Eligibility(enum.Enum):
    """Sync decision for a single title."""

    NOT_SUBSCRIPTION = "not-subscription"
    OWNED = "owned"
    SUBSCRIPTION_ELIGIBLE = "subscription-eligible"
    SUBSCRIPTION_INELIGIBLE = "subscription-ineligible"
    PLAYED_LEFT_CATALOG = "played-left-catalog"


class UnavailableReason(enum.Enum):
    LEFT_CATALOG = "left-catalog"
    INTEREST_UNAVAILABLE = "interest-unavailable"


@dataclass(frozen=True)
class CatalogEntry:
    """One title in the subscription catalog snapshot."""

    id: str
    title: str
    available: bool = True


@dataclass(frozen=True)
class UnavailableEntry:
    name: str
    reason: UnavailableReason
    last_seen: datetime | None = None
    was_played: bool = False


@dataclass
class EligibilityResult:
    """Records to sync, the new unavailable report, and titles that came back."""

    to_sync: list[RawRecord] = field(default_factory=list)
    unavailable: list[UnavailableEntry] = field(default_factory=list)
    returned: list[str] = field(default_factory=list)


def catalog_titles(catalog: Iterable[CatalogEntry]) -> set[str]:
    """Normalized titles currently available in the catalog."""
    return {normalize(entry.title) for entry in catalog if entry.available}


def classify_title(
    title: str,
    played: bool,
    available: set[str],
    owned: set[str],
) -> Eligibility:
    """Classify one Xbox/Game Pass title.

    Args:
        title: Title as reported (normalized here)
        played: True if the title came from a played Xbox/Game Pass record,
            False for a title known only from the interest list
        available: Normalized titles present in the live catalog
        owned: Normalized titles from the owned list
    """
    norm = normalize(title)
    if norm in owned:
        return Eligibility.OWNED
    if norm in available:
        return Eligibility.SUBSCRIPTION_ELIGIBLE
    if played:
        return Eligibility.PLAYED_LEFT_CATALOG
    return Eligibility.SUBSCRIPTION_INELIGIBLE


def classify_record(record: RawRecord, available: set[str], owned: set[str]) -> Eligibility:
    """Classify a played record; other platforms are never subject to the policy."""
    if record.source not in SUBSCRIPTION_SOURCES:
        return Eligibility.NOT_SUBSCRIPTION
    return classify_title(record.title, True, available, owned)


def resolve_source(title: str, available: set[str], owned: set[str]) -> Source:
    """Pick the source tag for an Xbox-family title: xbox if owned, gamepass if in catalog."""
    if classify_title(title, True, available, owned) is Eligibility.SUBSCRIPTION_ELIGIBLE:
        return SUBSCRIPTION
    return OWNED_PLATFORM


def resolve_eligibility(
    records: Sequence[RawRecord],
    catalog: Sequence[CatalogEntry],
    owned: Iterable[str],
    interests: Iterable[str],
    prior_unavailable: Sequence[UnavailableEntry] = (),
    as_of: datetime | None = None,
) -> EligibilityResult:
    """Apply the subscription policy to one run's snapshots.

    Records from other platforms pass through to ``to_sync`` untouched.
    Wanted titles that are in the catalog but were never played are synced
    as new Game Pass records built from the catalog entry.

    Args:
        records: Raw records from every source
        catalog: Live (or cached) subscription catalog
        owned: Titles owned outright on the platform
        interests: Want-to-play titles
        prior_unavailable: The previous run's unavailable report
        as_of: Timestamp stamped on new unavailable entries

    Returns:
        EligibilityResult. Inputs are not modified.
    """
    owned_titles = {normalize(title) for title in owned}
    available = catalog_titles(catalog)
    result = EligibilityResult()
    reported: set[str] = set()
    seen: set[str] = set()

    def report(name: str, reason: UnavailableReason, was_played: bool) -> None:
        norm = normalize(name)
        if norm in reported:
            return
        reported.add(norm)
        result.unavailable.append(
            UnavailableEntry(name=name, reason=reason, last_seen=as_of, was_played=was_played)
        )

    for record in records:
        state = classify_record(record, available, owned_titles)
        if state is Eligibility.NOT_SUBSCRIPTION:
            result.to_sync.append(record)
            continue

        seen.add(normalize(record.title))
        if state in (Eligibility.OWNED, Eligibility.SUBSCRIPTION_ELIGIBLE):
            source = resolve_source(record.title, available, owned_titles)
            result.to_sync.append(replace(record, source=source))
        else:
            report(record.title, UnavailableReason.LEFT_CATALOG, was_played=True)

    catalog_by_title: dict[str, CatalogEntry] = {}
    for entry in catalog:
        if entry.available:
            catalog_by_title.setdefault(normalize(entry.title), entry)

    # Interests usually arrive as a set; sort so output order is reproducible
    for interest in sorted(interests, key=lambda title: (normalize(title), title)):
        norm = normalize(interest)
        if norm in seen:
            continue
        seen.add(norm)
        state = classify_title(interest, False, available, owned_titles)
        if state is Eligibility.SUBSCRIPTION_ELIGIBLE:
            entry = catalog_by_title[norm]
            result.to_sync.append(
                RawRecord(
                    source=SUBSCRIPTION,
                    external_id=f"gamepass-interest-{entry.id}",
                    title=entry.title,
                )
            )
        elif state is Eligibility.SUBSCRIPTION_INELIGIBLE:
            report(interest, UnavailableReason.INTEREST_UNAVAILABLE, was_played=False)

    returned_titles: set[str] = set()
    for entry in prior_unavailable:
        norm = normalize(entry.name)
        if norm in available and norm not in returned_titles:
            returned_titles.add(norm)
            result.returned.append(entry.name)

    logger.info(
        "Subscription check: %d to sync, %d unavailable, %d returned",
        len(result.to_sync),
        len(result.unavailable),
        len(result.returned),
    )
    return result
