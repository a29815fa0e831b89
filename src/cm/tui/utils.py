"""Terminal text utilities: grapheme segmentation and width measurement.

Provides the grapheme segmenter used by the line editor for cursor motion,
display-width measurement for painting cells, and word/punctuation
classification for word-wise motions.
"""

from __future__ import annotations

import re
import unicodedata

import grapheme
import wcwidth as _wcwidth


# ---------------------------------------------------------------------------
# Grapheme segmentation
# ---------------------------------------------------------------------------


class _GraphemeSegmenter:
    """Thin wrapper around ``grapheme.graphemes``."""

    @staticmethod
    def segment(text: str) -> list[str]:
        return list(grapheme.graphemes(text))


def get_segmenter() -> _GraphemeSegmenter:
    """Return a grapheme segmenter instance."""
    return _GraphemeSegmenter()


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

# Punctuation characters for word-break classification
_PUNCTUATION_REGEX = re.compile(r"[(){}\[\]<>.,;:'\"!?\+\-=*/\\|&%\^$#@~`]")

# ---------------------------------------------------------------------------
# Width cache (capped at 512 entries)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


# ---------------------------------------------------------------------------
# Grapheme width
# ---------------------------------------------------------------------------


def grapheme_width(g: str) -> int:
    """Return the terminal display width of a single grapheme cluster.

    Control characters and combining marks are zero width, emoji
    sequences are two columns wide, everything else is measured by
    ``wcwidth`` on its first code point.
    """
    if not g:
        return 0

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        if cp in (0xFE0F, 0x200D):  # VS16, ZWJ
            return 2
        if 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2

    first = g[0]
    if ord(first) >= 0x1F000 or 0x2600 <= ord(first) <= 0x27BF:
        return 2

    cat = unicodedata.category(first)
    if cat.startswith("M") or cat == "Cf":
        return 0

    return max(_wcwidth.wcwidth(first), 0)


def visible_width(text: str) -> int:
    """Calculate the visible terminal width of *text*.

    Pure printable ASCII takes a fast path; other strings are measured per
    grapheme cluster and cached.
    """
    if not text:
        return 0

    if all(0x20 <= ord(ch) <= 0x7E for ch in text):
        return len(text)

    cached = _width_cache.get(text)
    if cached is not None:
        return cached

    total = sum(grapheme_width(g) for g in grapheme.graphemes(text))
    return _cache_width(text, total)


def truncate_to_width(text: str, max_width: int) -> str:
    """Truncate *text* to fit within *max_width* visible columns.

    Cuts happen on grapheme boundaries, so a wide character that would
    straddle the limit is dropped whole.
    """
    if max_width <= 0:
        return ""
    if visible_width(text) <= max_width:
        return text
    return _take_columns(text, max_width)


def _take_columns(text: str, max_cols: int) -> str:
    """Return the longest grapheme prefix of *text* within *max_cols*."""
    result: list[str] = []
    cols = 0
    for g in grapheme.graphemes(text):
        w = grapheme_width(g)
        if cols + w > max_cols:
            break
        result.append(g)
        cols += w
    return "".join(result)


# ---------------------------------------------------------------------------
# Character classification
# ---------------------------------------------------------------------------


def is_whitespace_char(char: str) -> bool:
    """Return ``True`` if *char* is a whitespace character."""
    return char in (" ", "\t", "\n", "\r", "\f", "\v")


def is_punctuation_char(char: str) -> bool:
    """Return ``True`` if *char* is a punctuation character."""
    return bool(_PUNCTUATION_REGEX.match(char))
