#!/usr/bin/env python3
"""Reconcile game ownership snapshots into one deduplicated library.

Loads raw records written by the platform fetchers (Steam, Playnite export,
...), applies the Game Pass eligibility policy when a catalog snapshot is
given, groups and merges records into canonical games, applies manual
property overrides, and writes the library JSON for the sync step.

Usage:
    # Steam snapshot + Playnite export, no Game Pass handling
    python scripts/reconcile_library.py --records data/steam.json \\
        --playnite data/playnite.json

    # With Game Pass eligibility (updates the unavailable report)
    python scripts/reconcile_library.py --records data/steam.json \\
        --catalog .cache/gamepass/catalog.json

Environment variables:
    GAMEKEEPER_DATA_DIR  Directory holding the default snapshot files
                         (default: data).
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))
from gamekeeper.merge import process_raw_records, source_breakdown
from gamekeeper.overrides import apply_property_overrides, load_overrides
from gamekeeper.playnite import load_playnite_export
from gamekeeper.records import CanonicalRecord, RawRecord
from gamekeeper.snapshots import (
    INTERESTS_KEY,
    OWNED_GAMES_KEY,
    default_data_dir,
    load_catalog,
    load_raw_records,
    load_title_set,
    write_library,
)
from gamekeeper.subscription import EligibilityResult, resolve_eligibility
from gamekeeper.unavailable_report import UnavailableReport

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    data_dir = default_data_dir()
    parser = argparse.ArgumentParser(
        description=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--records",
        type=Path,
        action="append",
        default=None,
        metavar="FILE",
        help="Raw records snapshot written by a platform fetcher. Repeatable "
        "(default: $GAMEKEEPER_DATA_DIR/records.json).",
    )
    parser.add_argument(
        "--playnite",
        type=Path,
        default=data_dir / "playnite.json",
        metavar="FILE",
        help="Playnite library export (Epic, GOG, Xbox games). Skipped if missing.",
    )
    parser.add_argument(
        "--overrides",
        type=Path,
        default=data_dir / "overrides.json",
        metavar="FILE",
        help="Force-merge and property overrides. Skipped if missing.",
    )
    parser.add_argument(
        "--catalog",
        type=Path,
        default=None,
        metavar="FILE",
        help="Game Pass catalog snapshot. Enables subscription eligibility "
        "handling; without it Xbox and Game Pass records pass through as-is.",
    )
    parser.add_argument(
        "--owned",
        type=Path,
        default=data_dir / "owned-xbox-games.json",
        metavar="FILE",
        help="Titles owned outright on Xbox ({\"ownedGames\": [...]}).",
    )
    parser.add_argument(
        "--interests",
        type=Path,
        default=data_dir / "gamepass-interests.json",
        metavar="FILE",
        help="Game Pass want-to-play list ({\"wantToPlay\": [...]}).",
    )
    parser.add_argument(
        "--unavailable",
        type=Path,
        default=data_dir / "gamepass-unavailable.json",
        metavar="FILE",
        help="Unavailable games report; read for returned titles, then replaced.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=data_dir / "library.json",
        metavar="FILE",
        help="Where to write the canonical library (default: $GAMEKEEPER_DATA_DIR/library.json).",
    )

    args = parser.parse_args(argv)
    if args.records is None:
        args.records = [data_dir / "records.json"]
    return args


def load_records(args: argparse.Namespace) -> list[RawRecord]:
    """Load every configured record snapshot, in the order given."""
    records: list[RawRecord] = []
    for path in args.records:
        records.extend(load_raw_records(path))
    records.extend(load_playnite_export(args.playnite))
    return records


def apply_subscription_policy(
    records: list[RawRecord],
    args: argparse.Namespace,
    now: datetime,
) -> EligibilityResult:
    """Resolve Game Pass eligibility and replace the unavailable report."""
    if not args.catalog.exists():
        logger.error(f"Game Pass catalog not found: {args.catalog}")
        raise SystemExit(1)

    catalog = load_catalog(args.catalog)
    owned = load_title_set(args.owned, OWNED_GAMES_KEY)
    interests = load_title_set(args.interests, INTERESTS_KEY)
    prior = UnavailableReport.load(args.unavailable)

    result = resolve_eligibility(records, catalog, owned, interests, prior.entries, as_of=now)

    UnavailableReport(entries=result.unavailable, last_updated=now).save(args.unavailable)
    for name in result.returned:
        logger.info("Back on Game Pass: %s", name)
    return result


def print_report(
    raw_count: int,
    library: list[CanonicalRecord],
    eligibility: EligibilityResult | None = None,
) -> None:
    """Print the reconciliation summary."""
    print(f"\n{'=' * 80}")
    print("GAME LIBRARY RECONCILIATION REPORT")
    print(f"{'=' * 80}")

    print(f"\nRaw records:       {raw_count:>8,}")
    print(f"Unique games:      {len(library):>8,}")
    multi_source = sum(1 for record in library if len(record.owned_sources) > 1)
    print(f"Multi-source:      {multi_source:>8,}")
    with_hours = sum(1 for record in library if record.total_hours is not None)
    print(f"With playtime:     {with_hours:>8,}")

    print("\n--- Primary source breakdown ---")
    for source, count in source_breakdown(library).items():
        print(f"{source:<12} {count:>8,} games")

    if eligibility is not None:
        print("\n--- Game Pass ---")
        print(f"Unavailable:       {len(eligibility.unavailable):>8,}")
        for entry in eligibility.unavailable:
            played = " (played)" if entry.was_played else ""
            print(f"  {entry.name:<50} {entry.reason.value}{played}")
        print(f"Returned:          {len(eligibility.returned):>8,}")
        for name in eligibility.returned:
            print(f"  {name}")


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    now = datetime.now(timezone.utc)

    records = load_records(args)
    if not records:
        logger.warning("No games found from any source. Exiting.")
        return
    raw_count = len(records)
    logger.info(f"Total raw records: {raw_count:,}")

    overrides = load_overrides(args.overrides)

    eligibility = None
    if args.catalog is not None:
        eligibility = apply_subscription_policy(records, args, now)
        records = eligibility.to_sync

    library = process_raw_records(records, overrides.force_merge)
    library = [apply_property_overrides(record, overrides) for record in library]

    write_library(args.output, library, generated_at=now)
    print_report(raw_count, library, eligibility)


if __name__ == "__main__":
    main()
