"""Title normalization for cross-platform game matching."""

from __future__ import annotations

import re

TRADEMARK_RE = re.compile(r"[™®©]")

# Colon, apostrophe (straight and typographic) and hyphen become word breaks
PUNCTUATION_RE = re.compile(r"[:'’-]")

WHITESPACE_RE = re.compile(r"\s+")

ARTICLE_RE = re.compile(r"\b(?:the|a|an)\b")

# Edition/release qualifiers. Punctuation has already been replaced by the
# time these run, so "director's cut" arrives as "director s cut".
QUALIFIER_RE = re.compile(
    r"""\b(?:
        goty
        |game\s+of\s+(?:the\s+)?year
        |edition
        |definitive
        |complete
        |enhanced
        |remastered
        |director\s*s\s+cut
    )\b""",
    re.VERBOSE,
)

NON_SLUG_RE = re.compile(r"[^a-z0-9]")
HYPHEN_RUN_RE = re.compile(r"-+")


def _collapse(text: str) -> str:
    return WHITESPACE_RE.sub(" ", text).strip()


def normalize(title: str) -> str:
    """Canonicalize a game title into a comparable form.

    Lowercases, strips trademark glyphs, turns ``: ' -`` into spaces, drops
    the English articles and edition qualifiers (GOTY, Definitive, ...) as
    whole words, and collapses whitespace.

    Idempotent: ``normalize(normalize(x)) == normalize(x)``.
    """
    text = title.lower()
    text = TRADEMARK_RE.sub("", text)
    text = PUNCTUATION_RE.sub(" ", text)
    text = _collapse(text)
    # Removing one word can bring two others together into a qualifier
    # ("game of edition year"), so strip until nothing changes.
    prev = None
    while text != prev:
        prev = text
        text = _collapse(ARTICLE_RE.sub("", text))
        text = _collapse(QUALIFIER_RE.sub("", text))
    return text


def slugify(title: str) -> str:
    """Build a URL-safe identifier from a title, e.g. ``hollow-knight``."""
    slug = NON_SLUG_RE.sub("-", normalize(title))
    slug = HYPHEN_RUN_RE.sub("-", slug)
    return slug.strip("-")
