"""Persistence for the subscription unavailable-games report.

The report is recomputed every run and replaces the previous file. The
previous file is only read to work out which titles have returned to the
catalog.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from gamekeeper.records import format_timestamp, parse_timestamp
from gamekeeper.subscription import UnavailableEntry, UnavailableReason

logger = logging.getLogger(__name__)


def _entry_to_dict(entry: UnavailableEntry) -> dict:
    return {
        "name": entry.name,
        "reason": entry.reason.value,
        "lastSeen": format_timestamp(entry.last_seen),
        "wasPlayed": entry.was_played,
    }


def _entry_from_dict(data: dict) -> UnavailableEntry:
    reason = data.get("reason")
    try:
        parsed_reason = UnavailableReason(reason)
    except ValueError:
        raise ValueError(
            f"Unknown unavailable reason {reason!r} for {data.get('name')!r}"
        ) from None
    return UnavailableEntry(
        name=data["name"],
        reason=parsed_reason,
        last_seen=parse_timestamp(data.get("lastSeen")),
        was_played=bool(data.get("wasPlayed", False)),
    )


@dataclass
class UnavailableReport:
    """Titles withheld from sync because the subscription no longer offers them."""

    entries: list[UnavailableEntry] = field(default_factory=list)
    last_updated: datetime | None = None

    def names(self) -> list[str]:
        return [entry.name for entry in self.entries]

    def save(self, path: Path) -> None:
        """Write the report to a JSON file atomically (write .tmp, then rename)."""
        data = {
            "unavailableGames": [_entry_to_dict(entry) for entry in self.entries],
            "lastUpdated": format_timestamp(self.last_updated),
        }
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        tmp_path.replace(path)
        logger.info("Updated unavailable games report: %d games", len(self.entries))

    @classmethod
    def load(cls, path: Path) -> UnavailableReport:
        """Load a report from a JSON file.

        A missing file is a fresh start: an empty report.
        """
        if not path.exists():
            logger.warning("No unavailable report at %s, starting empty", path)
            return cls()
        data = json.loads(path.read_text(encoding="utf-8"))
        return cls(
            entries=[_entry_from_dict(entry) for entry in data.get("unavailableGames") or []],
            last_updated=parse_timestamp(data.get("lastUpdated")),
        )
