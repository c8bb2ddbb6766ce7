"""Reconcile timestamped alignment words with independently tokenized text.

The alignment track comes from a remote forced aligner and may disagree with
the rendered document in whitespace, punctuation, casing or minor wording.
Matching is greedy and local: each token is looked up in a small window
ahead of a cursor that only ever moves forward. Tokens without a match fall
back to verbatim text, so a noisy word never desynchronizes the remainder.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import NamedTuple, Union

from vocasync.timestamps.models import AlignedWord
from vocasync.utils.constant import MATCH_LOOKAHEAD

__all__ = [
    "AnnotatedSpan",
    "DocumentMatcher",
    "MatchCursor",
    "MatchResult",
    "TimedSpan",
    "VerbatimSpan",
    "match_text",
    "normalize_word",
    "tokenize",
]

# Maximal runs of Unicode letters/numbers plus straight and typographic apostrophes.
_TOKEN_RE = re.compile(r"(?:[^\W_]|['’])+")
_NON_ALNUM_RE = re.compile(r"[\W_]+")


@dataclass(frozen=True)
class VerbatimSpan:
    """Text rendered as-is."""

    text: str


@dataclass(frozen=True)
class TimedSpan:
    """Text matched to one alignment entry.

    Attributes:
        text: Original (unnormalized) token text.
        start: Start time in seconds.
        end: End time in seconds.
        track_index: Index of the matched entry in the alignment track.
    """

    text: str
    start: float
    end: float
    track_index: int


AnnotatedSpan = Union[VerbatimSpan, TimedSpan]  # noqa: UP007


@dataclass(frozen=True)
class MatchCursor:
    """Position in the alignment track from which the next search starts."""

    position: int = 0

    def __post_init__(self) -> None:
        if self.position < 0:
            raise ValueError("cursor position must be non-negative")


class MatchResult(NamedTuple):
    """Spans produced for one text fragment and the cursor after it."""

    spans: list[AnnotatedSpan]
    cursor: MatchCursor


def normalize_word(word: str) -> str:
    """Lowercase ``word`` and strip every non letter/number character."""
    return _NON_ALNUM_RE.sub("", word.lower())


def tokenize(text: str) -> list[tuple[str, bool]]:
    """Split ``text`` into alternating separator and token pieces.

    Args:
        text: Arbitrary text fragment.

    Returns:
        ``(piece, is_token)`` pairs in original order; joining every piece
        reproduces ``text`` exactly.
    """
    pieces: list[tuple[str, bool]] = []
    last_end = 0
    for match in _TOKEN_RE.finditer(text):
        if match.start() > last_end:
            pieces.append((text[last_end : match.start()], False))
        pieces.append((match.group(0), True))
        last_end = match.end()
    if last_end < len(text):
        pieces.append((text[last_end:], False))
    return pieces


def _find_match(
    key: str,
    track: Sequence[AlignedWord],
    position: int,
    lookahead: int,
    normalize: Callable[[str], str],
) -> int | None:
    if not key:
        return None
    for index in range(position, min(position + lookahead, len(track))):
        if normalize(track[index].word) == key:
            return index
    return None


def _merge_verbatim(spans: list[AnnotatedSpan]) -> list[AnnotatedSpan]:
    merged: list[AnnotatedSpan] = []
    for span in spans:
        last = merged[-1] if merged else None
        if isinstance(span, VerbatimSpan) and isinstance(last, VerbatimSpan):
            merged[-1] = VerbatimSpan(last.text + span.text)
        else:
            merged.append(span)
    return merged


def match_text(
    text: str,
    track: Sequence[AlignedWord],
    cursor: MatchCursor | None = None,
    *,
    normalize: Callable[[str], str] = normalize_word,
    lookahead: int = MATCH_LOOKAHEAD,
) -> MatchResult:
    """Annotate one text fragment against the alignment track.

    Each token is normalized and compared with the entries
    ``track[cursor : cursor + lookahead]``; the first equal entry wins and
    the cursor moves just past it. Unmatched tokens stay verbatim and leave
    the cursor untouched. Adjacent verbatim spans are merged; timed spans
    never are.

    The function is pure: calling it twice with the same arguments yields the
    same result.

    Args:
        text: Text of one narrated node.
        track: Alignment words in spoken order.
        cursor: Position to search from; defaults to the track start.
        normalize: Token normalizer used on both sides of the comparison.
        lookahead: Number of track entries scanned per token.

    Returns:
        The spans for ``text`` and the updated cursor.

    Examples:
        >>> track = [AlignedWord(word="the", start=0.0, end=0.2)]
        >>> match_text("The.", track).spans
        [TimedSpan(text='The', start=0.0, end=0.2, track_index=0), VerbatimSpan(text='.')]
    """
    cursor = cursor or MatchCursor()
    if not text:
        return MatchResult([], cursor)

    position = cursor.position
    spans: list[AnnotatedSpan] = []
    for piece, is_token in tokenize(text):
        if not is_token:
            spans.append(VerbatimSpan(piece))
            continue
        index = _find_match(normalize(piece), track, position, lookahead, normalize)
        if index is None:
            spans.append(VerbatimSpan(piece))
            continue
        entry = track[index]
        spans.append(TimedSpan(piece, entry.start, entry.end, index))
        position = index + 1

    return MatchResult(_merge_verbatim(spans), MatchCursor(position))


class DocumentMatcher:
    """Threads one cursor through every narrated text node of a document.

    Create one instance per document render pass and feed it text nodes in
    document order. Text from non-narrated containers (code, scripts, math
    renderings) must not be fed.

    Examples:
        >>> matcher = DocumentMatcher(track)
        >>> spans = matcher.feed("Hello world")
        >>> matcher.cursor.position
        2
    """

    def __init__(
        self,
        track: Sequence[AlignedWord],
        *,
        normalize: Callable[[str], str] = normalize_word,
        lookahead: int = MATCH_LOOKAHEAD,
    ) -> None:
        self.track = list(track)
        self.normalize = normalize
        self.lookahead = lookahead
        self.cursor = MatchCursor()

    def feed(self, text: str) -> list[AnnotatedSpan]:
        """Annotate the next text node and advance the cursor."""
        result = match_text(
            text,
            self.track,
            self.cursor,
            normalize=self.normalize,
            lookahead=self.lookahead,
        )
        self.cursor = result.cursor
        return result.spans
