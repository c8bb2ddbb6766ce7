"""Word alignment: matching timestamped words against rendered document text."""

from .matcher import (
    DocumentMatcher,
    MatchCursor,
    MatchResult,
    TimedSpan,
    VerbatimSpan,
    match_text,
    normalize_word,
    tokenize,
)

__all__ = [
    "DocumentMatcher",
    "MatchCursor",
    "MatchResult",
    "TimedSpan",
    "VerbatimSpan",
    "match_text",
    "normalize_word",
    "tokenize",
]
