"""Unit tests for gamekeeper/playnite.py."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

import pytest

from gamekeeper.playnite import (
    IMPORTED_SOURCES,
    load_playnite_export,
    map_playnite_source,
    playnite_game_to_record,
)
from gamekeeper.sources import Source


class TestMapPlayniteSource:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("Steam", Source.STEAM),
            ("Epic", Source.EPIC),
            ("Epic Games Store", Source.EPIC),
            ("GOG", Source.GOG),
            ("Xbox", Source.XBOX),
            ("Microsoft Store", Source.XBOX),
            ("Xbox Game Pass", Source.GAMEPASS),
            ("GamePass", Source.GAMEPASS),
            ("itch.io", Source.MANUAL),
            ("", Source.MANUAL),
            (None, Source.MANUAL),
        ],
    )
    def test_mapping(self, name, expected) -> None:
        assert map_playnite_source(name) is expected


class TestPlayniteGameToRecord:
    def test_full_entry(self) -> None:
        record = playnite_game_to_record(
            {
                "GameId": "a1b2",
                "Name": "Hades",
                "Source": "Epic",
                "SourceId": "1145360",
                "Playtime": 5400,
                "LastActivity": "2024-02-10T20:30:00Z",
                "CoverImage": "covers/hades.jpg",
                "ReleaseDate": "2020-09-17T00:00:00Z",
                "Genres": [{"Name": "Action"}, {"Name": "Roguelike"}],
            },
            Source.EPIC,
        )
        assert record.source is Source.EPIC
        assert record.external_id == "a1b2"
        assert record.native_numeric_id == 1145360
        assert record.hours_played == 1.5
        assert record.last_played_at == datetime(2024, 2, 10, 20, 30, tzinfo=timezone.utc)
        assert record.genres == ("Action", "Roguelike")

    @pytest.mark.parametrize("source_id", [None, "", "0", "abc-123"])
    def test_non_numeric_source_id_ignored(self, source_id) -> None:
        record = playnite_game_to_record(
            {"GameId": "x", "Name": "Celeste", "SourceId": source_id}, Source.GOG
        )
        assert record.native_numeric_id is None

    def test_zero_playtime_is_none(self) -> None:
        record = playnite_game_to_record(
            {"GameId": "x", "Name": "Celeste", "Playtime": 0}, Source.GOG
        )
        assert record.hours_played is None
        assert record.genres is None


class TestLoadPlayniteExport:
    def test_imports_supported_sources_only(self, tmp_path, caplog) -> None:
        path = tmp_path / "playnite.json"
        path.write_text(
            json.dumps(
                {
                    "Games": [
                        {"GameId": "1", "Name": "Portal", "Source": "Steam"},
                        {"GameId": "2", "Name": "Hades", "Source": "Epic"},
                        {"GameId": "3", "Name": "Celeste", "Source": "GOG"},
                        {"GameId": "4", "Name": "Starfield", "Source": "Xbox Game Pass"},
                        {"GameId": "5", "Name": "Halo Infinite", "Source": "Xbox"},
                        {"GameId": "6", "Name": "Homebrew", "Source": None},
                    ]
                }
            )
        )
        with caplog.at_level(logging.INFO, logger="gamekeeper.playnite"):
            records = load_playnite_export(path)
        assert [(r.title, r.source) for r in records] == [
            ("Hades", Source.EPIC),
            ("Celeste", Source.GOG),
            ("Starfield", Source.GAMEPASS),
            ("Halo Infinite", Source.XBOX),
        ]
        assert any("Processed 4 of 6 Playnite games" in r.message for r in caplog.records)

    def test_missing_file(self, tmp_path) -> None:
        assert load_playnite_export(tmp_path / "playnite.json") == []

    @pytest.mark.parametrize("payload", [{}, {"Games": None}, [1, 2]])
    def test_invalid_format(self, tmp_path, payload) -> None:
        path = tmp_path / "playnite.json"
        path.write_text(json.dumps(payload))
        with pytest.raises(ValueError, match="missing Games array"):
            load_playnite_export(path)

    def test_fixture_export(self, fixtures_dir) -> None:
        records = load_playnite_export(fixtures_dir / "playnite.json")
        assert records
        assert {r.source for r in records} <= IMPORTED_SOURCES
