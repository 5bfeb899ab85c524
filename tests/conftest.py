"""Shared fixtures for unit and E2E tests.

``make_record`` builds RawRecords with sensible defaults so tests only spell
out the fields they care about. JSON snapshots used by the E2E suite live in
``tests/fixtures/``.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from gamekeeper.records import RawRecord
from gamekeeper.sources import Source

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def build_record(title: str, source: Source | str = Source.STEAM, **fields) -> RawRecord:
    """Build a RawRecord; the external ID is derived from source and title."""
    if isinstance(source, str):
        source = Source(source)
    fields.setdefault("external_id", f"{source.value}-{title.lower().replace(' ', '-')}")
    return RawRecord(source=source, title=title, **fields)


@pytest.fixture
def make_record():
    """Factory fixture: ``make_record("Portal", Source.STEAM, native_numeric_id=400)``."""
    return build_record


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR
