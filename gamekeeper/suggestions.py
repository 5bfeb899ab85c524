"""Merge suggestions: near-miss title pairs for a human to review.

Suggestions never change the canonical library. Confirmed pairs go into the
``forceMerge`` section of the overrides file.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from gamekeeper.matching import AUTO_MATCH_THRESHOLD, SUBSTRING_SCORE, similarity
from gamekeeper.records import RawRecord, format_timestamp
from gamekeeper.sources import Source

logger = logging.getLogger(__name__)

VERY_HIGH_THRESHOLD = 0.90


@dataclass(frozen=True)
class MergeSuggestion:
    titles: tuple[str, str]
    sources: tuple[Source, Source]
    similarity: float
    reason: str

    def to_dict(self) -> dict:
        return {
            "games": list(self.titles),
            "sources": [source.value for source in self.sources],
            "similarity": self.similarity,
            "reason": self.reason,
        }


def suggestion_reason(score: float) -> str:
    """Describe a similarity band for the review file."""
    if score >= SUBSTRING_SCORE:
        return "substring/edition variant"
    if score >= VERY_HIGH_THRESHOLD:
        return "very high similarity / minor variation"
    return "high similarity / possibly related"


def suggest(records: Sequence[RawRecord]) -> list[MergeSuggestion]:
    """Find cross-source title pairs that look alike but were not merged.

    Pairs whose score, rounded to two decimals, falls in [0.85, 1.0) are
    reported; exact matches already merged automatically. Same-source pairs
    are skipped. Each record takes part in at most one suggestion (the first
    qualifying partner, in input order).

    Returns:
        Suggestions sorted by similarity, highest first.
    """
    suggestions: list[MergeSuggestion] = []
    paired: set[int] = set()

    for i, first in enumerate(records):
        if i in paired:
            continue
        for j in range(i + 1, len(records)):
            if j in paired:
                continue
            second = records[j]
            if first.source == second.source:
                continue

            # Band and reason follow the reported two-decimal score
            score = round(similarity(first.title, second.title), 2)
            if score < AUTO_MATCH_THRESHOLD or score >= 1.0:
                continue

            suggestions.append(
                MergeSuggestion(
                    titles=(first.title, second.title),
                    sources=(first.source, second.source),
                    similarity=score,
                    reason=suggestion_reason(score),
                )
            )
            paired.update((i, j))
            break

    suggestions.sort(key=lambda s: s.similarity, reverse=True)
    return suggestions


def save_suggestions(
    path: Path,
    suggestions: Sequence[MergeSuggestion],
    generated_at: datetime | None = None,
) -> None:
    """Write suggestions to a JSON review file."""
    output = {
        "generatedAt": format_timestamp(generated_at),
        "totalSuggestions": len(suggestions),
        "suggestions": [
            {"id": idx, **suggestion.to_dict()} for idx, suggestion in enumerate(suggestions, 1)
        ],
        "instructions": {
            "howToUse": "Review these suggestions and add confirmed merges to "
            'the overrides file in the "forceMerge" array',
            "example": {
                "games": ["Game Name", "Game Name: Enhanced Edition"],
                "canonicalName": "Game Name",
            },
        },
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(output, f, indent=2, ensure_ascii=False)
        f.write("\n")
    logger.info("Saved %d merge suggestions to %s", len(suggestions), path)
