"""Group raw records into candidate "same game" clusters."""

from __future__ import annotations

from collections.abc import Sequence

from gamekeeper.matching import titles_match
from gamekeeper.normalize import slugify
from gamekeeper.overrides import ForceMergeRule
from gamekeeper.records import RawRecord
from gamekeeper.sources import NATIVE_ID_SOURCE


def native_id_key(native_numeric_id: int) -> str:
    """Group key for a native ID, qualified by the ID space it belongs to."""
    return f"{NATIVE_ID_SOURCE.value}:{native_numeric_id}"


def group(
    records: Sequence[RawRecord],
    rules: Sequence[ForceMergeRule] = (),
) -> dict[str, list[RawRecord]]:
    """Group records that describe the same logical game.

    Per record, in order:

    1. A native numeric ID puts it in the ``steam:<id>`` group, whatever the
       title says.
    2. Otherwise it joins the first title-keyed group whose first record
       matches by forced-merge rule or exact normalized title.
    3. Otherwise it opens a new ``name:<slug>`` group.

    Fuzzy matches are never grouped here: two titles at 0.90 similarity stay
    apart and show up as a merge suggestion instead.

    Returns:
        Group key -> records, in first-seen group order, input order within
        each group. Every input record lands in exactly one group.
    """
    groups: dict[str, list[RawRecord]] = {}
    title_keys: list[str] = []

    for record in records:
        if record.native_numeric_id is not None:
            groups.setdefault(native_id_key(record.native_numeric_id), []).append(record)
            continue

        for key in title_keys:
            if titles_match(record.title, groups[key][0].title, rules):
                groups[key].append(record)
                break
        else:
            key = f"name:{slugify(record.title)}"
            # Distinct titles can share a slug ("Doom!" and "Doom?")
            if key in groups:
                suffix = 2
                while f"{key}#{suffix}" in groups:
                    suffix += 1
                key = f"{key}#{suffix}"
            groups[key] = [record]
            title_keys.append(key)

    return groups
