"""User-authored overrides: forced merges and manual property corrections.

Overrides live in a JSON file the user edits by hand::

    {
      "forceMerge": [
        {"games": ["Game Name", "Game Name: Enhanced Edition"],
         "canonicalName": "Game Name"}
      ],
      "propertyOverrides": [
        {"match": "Game Name", "properties": {"coverImageUrl": "https://..."}}
      ]
    }

Loaded rules are plain values passed into each call; nothing here keeps
module-level state.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from gamekeeper.normalize import normalize
from gamekeeper.records import CanonicalRecord, parse_timestamp
from gamekeeper.sources import parse_source

logger = logging.getLogger(__name__)

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")

# Fields a property override may not touch: identity is decided by merging.
_PROTECTED_FIELDS = frozenset({"canonical_id", "extra"})
_TIMESTAMP_FIELDS = frozenset({"last_played_at", "release_date"})


@dataclass(frozen=True)
class ForceMergeRule:
    """Title variants that always denote the same game."""

    games: tuple[str, ...]
    canonical_name: str | None = None

    @property
    def resolved_name(self) -> str:
        """The explicit canonical name, else the first listed variant."""
        return self.canonical_name or self.games[0]


@dataclass(frozen=True)
class PropertyOverride:
    """Metadata to force onto any record whose title matches ``match``."""

    match: str
    properties: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Overrides:
    force_merge: tuple[ForceMergeRule, ...] = ()
    property_overrides: tuple[PropertyOverride, ...] = ()

    @classmethod
    def empty(cls) -> Overrides:
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Overrides:
        force_merge = tuple(
            ForceMergeRule(
                games=tuple(rule["games"]),
                canonical_name=rule.get("canonicalName"),
            )
            for rule in data.get("forceMerge") or []
            if rule.get("games")
        )
        property_overrides = tuple(
            PropertyOverride(match=entry["match"], properties=dict(entry.get("properties", {})))
            for entry in data.get("propertyOverrides") or []
        )
        return cls(force_merge=force_merge, property_overrides=property_overrides)


def load_overrides(path: Path) -> Overrides:
    """Load overrides from a JSON file.

    Returns empty overrides if the file doesn't exist.
    """
    if not path.exists():
        logger.warning("No overrides file at %s, using defaults", path)
        return Overrides.empty()
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    overrides = Overrides.from_dict(data)
    logger.info(
        "Loaded overrides: %d force-merge rules, %d property overrides",
        len(overrides.force_merge),
        len(overrides.property_overrides),
    )
    return overrides


def _covers(variant: str, title: str) -> bool:
    """Weak containment: equal, or either normalized form contains the other.

    Permissive so partial titles still hit their rule. Short titles can match
    unrelated variants; an empty normalized title is covered by every rule.
    """
    return variant == title or variant in title or title in variant


def resolve_forced_merge(
    title_a: str,
    title_b: str,
    rules: Sequence[ForceMergeRule],
) -> str | None:
    """Return the canonical name if a force-merge rule covers both titles.

    Rules are checked in order and the first rule covering both wins. A
    covering rule unifies the titles regardless of their similarity.
    """
    norm_a = normalize(title_a)
    norm_b = normalize(title_b)

    for rule in rules:
        variants = [normalize(game) for game in rule.games]
        has_a = any(_covers(variant, norm_a) for variant in variants)
        has_b = any(_covers(variant, norm_b) for variant in variants)
        if has_a and has_b:
            return rule.resolved_name

    return None


def _field_name(key: str) -> str:
    """Map ``coverImageUrl`` or ``cover_image_url`` to the dataclass field name."""
    return _CAMEL_RE.sub("_", key).lower()


def _coerce(name: str, value: Any) -> Any:
    if value is None:
        return None
    if name in _TIMESTAMP_FIELDS:
        return parse_timestamp(value)
    if name == "primary_source":
        return parse_source(value)
    if name == "owned_sources":
        return tuple(parse_source(tag) for tag in value)
    if name == "genres":
        return tuple(value)
    return value


def apply_property_overrides(record: CanonicalRecord, overrides: Overrides) -> CanonicalRecord:
    """Apply the first property override whose ``match`` covers the record's title.

    Override properties win over the record's own values. Keys that name no
    record field are kept in ``record.extra``; ``canonicalId`` is never
    overridden. Returns the record unchanged
    when no override matches.
    """
    normalized_title = normalize(record.title)
    record_fields = {f.name for f in dataclasses.fields(record)} - _PROTECTED_FIELDS

    for override in overrides.property_overrides:
        if not _covers(normalize(override.match), normalized_title):
            continue

        changes: dict[str, Any] = {}
        extra = dict(record.extra)
        for key, value in override.properties.items():
            name = _field_name(key)
            if name in _PROTECTED_FIELDS:
                logger.warning("Ignoring override of %s for %r", key, record.title)
            elif name in record_fields:
                changes[name] = _coerce(name, value)
            else:
                extra[key] = value
        logger.debug("Applying property override %r to %r", override.match, record.title)
        return dataclasses.replace(record, extra=extra, **changes)

    return record
