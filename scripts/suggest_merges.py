#!/usr/bin/env python3
"""Suggest likely duplicate games that were not merged automatically.

Compares titles across sources and lists pairs with similarity between 0.85
and 1.0. Review the output and copy confirmed pairs into the "forceMerge"
section of overrides.json; the next reconcile run will merge them.

Usage:
    python scripts/suggest_merges.py --records data/steam.json \\
        --playnite data/playnite.json [--output data/merge-suggestions.json]
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))
from gamekeeper.playnite import load_playnite_export
from gamekeeper.snapshots import default_data_dir, load_raw_records
from gamekeeper.suggestions import MergeSuggestion, save_suggestions, suggest

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
        help="Raw records snapshot. Repeatable (default: $GAMEKEEPER_DATA_DIR/records.json).",
    )
    parser.add_argument(
        "--playnite",
        type=Path,
        default=data_dir / "playnite.json",
        metavar="FILE",
        help="Playnite library export. Skipped if missing.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=data_dir / "merge-suggestions.json",
        metavar="FILE",
        help="Where to write the suggestions review file.",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=25,
        help="How many suggestions to print (default: 25). All are written to --output.",
    )
    args = parser.parse_args(argv)
    if args.records is None:
        args.records = [data_dir / "records.json"]
    return args


def print_suggestions(suggestions: list[MergeSuggestion], limit: int) -> None:
    print(f"\n{'=' * 80}")
    print(f"MERGE SUGGESTIONS ({len(suggestions)} pairs)")
    print(f"{'=' * 80}\n")
    if not suggestions:
        print("No near-duplicate titles found.")
        return

    print(f"{'Score':>5}  {'Title A':<30} {'Title B':<30} Reason")
    print("-" * 80)
    for suggestion in suggestions[:limit]:
        (title_a, title_b), (source_a, source_b) = suggestion.titles, suggestion.sources
        print(
            f"{suggestion.similarity:>5.2f}  "
            f"{title_a[:22] + ' (' + source_a.value + ')':<30} "
            f"{title_b[:22] + ' (' + source_b.value + ')':<30} "
            f"{suggestion.reason}"
        )
    if len(suggestions) > limit:
        print(f"  ... and {len(suggestions) - limit:,} more")


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)

    records = []
    for path in args.records:
        records.extend(load_raw_records(path))
    records.extend(load_playnite_export(args.playnite))
    if not records:
        logger.warning("No games found from any source. Exiting.")
        return

    suggestions = suggest(records)
    args.output.parent.mkdir(parents=True, exist_ok=True)
    save_suggestions(args.output, suggestions, generated_at=datetime.now(timezone.utc))
    print_suggestions(suggestions, args.limit)


if __name__ == "__main__":
    main()
