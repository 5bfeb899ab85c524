"""Matching utilities for game identity detection."""

from __future__ import annotations

from collections.abc import Sequence

from rapidfuzz.distance import Levenshtein

from gamekeeper.normalize import normalize
from gamekeeper.overrides import ForceMergeRule, resolve_forced_merge

AUTO_MATCH_THRESHOLD = 0.85
"""Similarity at or above which two titles are likely the same game."""

SUBSTRING_SCORE = 0.95
MIN_SUBSTRING_LENGTH = 10


def similarity(a: str, b: str) -> float:
    """Score how close two game titles are, from 0.0 to 1.0.

    Both titles are normalized first. Rules, first match wins:

    1. Identical after normalization -> 1.0
    2. Both at least 10 characters and one contains the other -> 0.95
       ("Game" vs "Game: Remake Collection")
    3. Otherwise 1 - edit_distance / longer_length

    Args:
        a: First title
        b: Second title

    Returns:
        Symmetric similarity score in [0, 1]
    """
    norm_a = normalize(a)
    norm_b = normalize(b)

    if norm_a == norm_b:
        return 1.0

    if len(norm_a) >= MIN_SUBSTRING_LENGTH and len(norm_b) >= MIN_SUBSTRING_LENGTH:
        if norm_a in norm_b or norm_b in norm_a:
            return SUBSTRING_SCORE

    max_length = max(len(norm_a), len(norm_b))
    if max_length == 0:
        return 1.0
    distance = Levenshtein.distance(norm_a, norm_b)
    return 1.0 - distance / max_length


def titles_match(a: str, b: str, rules: Sequence[ForceMergeRule] = ()) -> bool:
    """Check whether two titles should be grouped automatically.

    A forced-merge rule or an exact normalized match is required. Fuzzy
    scores are deliberately not consulted here; near misses are surfaced
    as merge suggestions for a human to confirm.
    """
    if resolve_forced_merge(a, b, rules) is not None:
        return True
    return normalize(a) == normalize(b)
