"""Unit tests for gamekeeper/snapshots.py."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

import pytest

from gamekeeper.records import CanonicalRecord
from gamekeeper.snapshots import (
    INTERESTS_KEY,
    OWNED_GAMES_KEY,
    default_data_dir,
    load_catalog,
    load_raw_records,
    load_title_set,
    write_library,
)
from gamekeeper.sources import Source
from gamekeeper.subscription import CatalogEntry


class TestDefaultDataDir:
    def test_default(self, monkeypatch) -> None:
        monkeypatch.delenv("GAMEKEEPER_DATA_DIR", raising=False)
        assert default_data_dir() == Path("data")

    def test_from_environment(self, monkeypatch, tmp_path) -> None:
        monkeypatch.setenv("GAMEKEEPER_DATA_DIR", str(tmp_path))
        assert default_data_dir() == tmp_path


class TestLoadTitleSet:
    def test_normalizes_titles(self, tmp_path) -> None:
        path = tmp_path / "owned.json"
        path.write_text(json.dumps({OWNED_GAMES_KEY: ["Halo Infinite™", "The Witcher 3"]}))
        assert load_title_set(path, OWNED_GAMES_KEY) == {"halo infinite", "witcher 3"}

    def test_missing_file(self, tmp_path, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="gamekeeper.snapshots"):
            assert load_title_set(tmp_path / "interests.json", INTERESTS_KEY) == set()
        assert any("Could not find" in r.message for r in caplog.records)

    def test_missing_key(self, tmp_path) -> None:
        path = tmp_path / "interests.json"
        path.write_text("{}")
        assert load_title_set(path, INTERESTS_KEY) == set()


class TestLoadCatalog:
    def test_loads_entries(self, tmp_path) -> None:
        path = tmp_path / "catalog.json"
        path.write_text(
            json.dumps(
                {
                    "lastUpdated": "2024-06-01T00:00:00Z",
                    "games": [
                        {"id": "9NBLGGH4R315", "title": "Starfield", "available": True},
                        {"id": 42, "title": "Old Game", "available": False},
                        {"id": "9P4KMR76PLLQ", "title": "Forza Horizon 5"},
                    ],
                }
            )
        )
        assert load_catalog(path) == [
            CatalogEntry("9NBLGGH4R315", "Starfield", True),
            CatalogEntry("42", "Old Game", False),
            CatalogEntry("9P4KMR76PLLQ", "Forza Horizon 5", True),
        ]

    def test_missing_file_raises(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            load_catalog(tmp_path / "catalog.json")


class TestLoadRawRecords:
    def test_bare_list(self, tmp_path) -> None:
        path = tmp_path / "records.json"
        path.write_text(json.dumps([{"source": "steam", "externalId": "400", "title": "Portal"}]))
        [record] = load_raw_records(path)
        assert record.source is Source.STEAM
        assert record.title == "Portal"

    def test_games_wrapper(self, tmp_path) -> None:
        path = tmp_path / "records.json"
        path.write_text(
            json.dumps({"games": [{"source": "gog", "externalId": "1", "name": "Hades"}]})
        )
        assert [r.title for r in load_raw_records(path)] == ["Hades"]

    def test_missing_file(self, tmp_path) -> None:
        assert load_raw_records(tmp_path / "records.json") == []

    def test_fixture_snapshot(self, fixtures_dir) -> None:
        records = load_raw_records(fixtures_dir / "records.json")
        assert records
        assert all(r.title for r in records)


class TestWriteLibrary:
    def test_writes_atomically(self, tmp_path) -> None:
        path = tmp_path / "out" / "library.json"
        record = CanonicalRecord(
            canonical_id="hades",
            title="Hades",
            primary_source=Source.EPIC,
            owned_sources=(Source.EPIC,),
        )
        write_library(path, [record], datetime(2024, 6, 1, tzinfo=timezone.utc))

        data = json.loads(path.read_text())
        assert data["generatedAt"] == "2024-06-01T00:00:00+00:00"
        assert data["totalGames"] == 1
        assert data["games"][0]["canonicalId"] == "hades"
        assert not path.with_suffix(".tmp").exists()
