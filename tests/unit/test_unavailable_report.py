"""Unit tests for gamekeeper/unavailable_report.py."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from gamekeeper.subscription import UnavailableEntry, UnavailableReason
from gamekeeper.unavailable_report import UnavailableReport

AS_OF = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class TestUnavailableReport:
    def test_save_format(self, tmp_path) -> None:
        path = tmp_path / "unavailable.json"
        report = UnavailableReport(
            entries=[
                UnavailableEntry("Old Game", UnavailableReason.LEFT_CATALOG, AS_OF, True),
                UnavailableEntry("Gone Forever", UnavailableReason.INTEREST_UNAVAILABLE),
            ],
            last_updated=AS_OF,
        )
        report.save(path)

        assert json.loads(path.read_text()) == {
            "unavailableGames": [
                {
                    "name": "Old Game",
                    "reason": "left-catalog",
                    "lastSeen": "2024-06-01T12:00:00+00:00",
                    "wasPlayed": True,
                },
                {
                    "name": "Gone Forever",
                    "reason": "interest-unavailable",
                    "lastSeen": None,
                    "wasPlayed": False,
                },
            ],
            "lastUpdated": "2024-06-01T12:00:00+00:00",
        }
        assert not path.with_suffix(".tmp").exists()

    def test_save_then_load(self, tmp_path) -> None:
        path = tmp_path / "unavailable.json"
        report = UnavailableReport(
            entries=[UnavailableEntry("Old Game", UnavailableReason.LEFT_CATALOG, AS_OF, True)],
            last_updated=AS_OF,
        )
        report.save(path)
        assert UnavailableReport.load(path) == report

    def test_save_replaces_previous_report(self, tmp_path) -> None:
        path = tmp_path / "unavailable.json"
        UnavailableReport(
            entries=[UnavailableEntry("Old Game", UnavailableReason.LEFT_CATALOG)]
        ).save(path)
        UnavailableReport(entries=[]).save(path)
        assert UnavailableReport.load(path).names() == []

    def test_save_creates_missing_directory(self, tmp_path) -> None:
        path = tmp_path / "fresh" / "gamepass-unavailable.json"
        report = UnavailableReport.load(path)
        report.save(path)
        assert json.loads(path.read_text())["unavailableGames"] == []

    def test_missing_file_is_empty(self, tmp_path) -> None:
        report = UnavailableReport.load(tmp_path / "unavailable.json")
        assert report.entries == []
        assert report.last_updated is None

    def test_unknown_reason(self, tmp_path) -> None:
        path = tmp_path / "unavailable.json"
        path.write_text(json.dumps({"unavailableGames": [{"name": "X", "reason": "expired"}]}))
        with pytest.raises(ValueError, match="Unknown unavailable reason 'expired'"):
            UnavailableReport.load(path)

    def test_names(self) -> None:
        report = UnavailableReport(
            entries=[
                UnavailableEntry("B", UnavailableReason.LEFT_CATALOG),
                UnavailableEntry("A", UnavailableReason.INTEREST_UNAVAILABLE),
            ]
        )
        assert report.names() == ["B", "A"]
