"""Annotate rendered HTML with timing-tagged word spans.

Narrated text nodes are visited in document order and run through one
:class:`DocumentMatcher`; nodes inside non-narrated containers (code, scripts,
math renderings, the document head, form fields) are left untouched and never
consume alignment entries.
"""

from __future__ import annotations

import html as html_lib
import logging
import re
from collections.abc import Iterator, Sequence

from bs4 import BeautifulSoup, NavigableString, Tag

from vocasync.alignment.matcher import AnnotatedSpan, DocumentMatcher, TimedSpan
from vocasync.timestamps.models import AlignedWord
from vocasync.utils.constant import CLASS_PREFIX, NON_NARRATED_CLASSES, NON_NARRATED_TAGS

logger = logging.getLogger(__name__)

__all__ = [
    "annotate_html",
    "iter_narrated_strings",
    "render_spans_html",
    "resolve_slug",
]


def _span_attrs(span: TimedSpan, class_prefix: str) -> dict[str, str]:
    return {
        "class": f"{class_prefix}-word",
        "data-word-index": str(span.track_index),
        "data-start": f"{span.start:.3f}",
        "data-end": f"{span.end:.3f}",
    }


def render_spans_html(spans: Sequence[AnnotatedSpan], class_prefix: str = CLASS_PREFIX) -> str:
    """Render spans as an HTML fragment.

    Verbatim spans become escaped text; timed spans become ``<span>`` elements
    carrying ``data-start``/``data-end`` (seconds, 3 decimals) and
    ``data-word-index``.
    """
    parts: list[str] = []
    for span in spans:
        text = html_lib.escape(span.text, quote=False)
        if isinstance(span, TimedSpan):
            attrs = " ".join(
                f'{name}="{html_lib.escape(value)}"'
                for name, value in _span_attrs(span, class_prefix).items()
            )
            parts.append(f"<span {attrs}>{text}</span>")
        else:
            parts.append(text)
    return "".join(parts)


def _is_non_narrated(tag: Tag) -> bool:
    if tag.name in NON_NARRATED_TAGS:
        return True
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    return any(cls in NON_NARRATED_CLASSES for cls in classes)


def iter_narrated_strings(soup: BeautifulSoup) -> Iterator[NavigableString]:
    """Yield narrated text nodes of ``soup`` in document order.

    Comments, doctypes and other special strings are skipped, as is any text
    nested in a non-narrated container.
    """
    for node in list(soup.find_all(string=True)):
        if type(node) is not NavigableString:
            continue
        if any(_is_non_narrated(parent) for parent in node.parents if isinstance(parent, Tag)):
            continue
        yield node


def annotate_html(
    html: str,
    track: Sequence[AlignedWord],
    *,
    class_prefix: str = CLASS_PREFIX,
) -> str:
    """Wrap matched words of ``html`` in timing spans.

    Args:
        html: Rendered document (fragment or full page).
        track: Alignment words for this document.
        class_prefix: CSS class prefix for generated spans.

    Returns:
        The annotated HTML; the input unchanged when ``track`` is empty.
    """
    if not track:
        return html

    soup = BeautifulSoup(html, "html.parser")
    matcher = DocumentMatcher(track)
    timed_total = 0

    for node in iter_narrated_strings(soup):
        spans = matcher.feed(str(node))
        if not any(isinstance(span, TimedSpan) for span in spans):
            continue
        replacements: list[NavigableString | Tag] = []
        for span in spans:
            if isinstance(span, TimedSpan):
                element = soup.new_tag("span", attrs=_span_attrs(span, class_prefix))
                element.string = span.text
                replacements.append(element)
                timed_total += 1
            else:
                replacements.append(NavigableString(span.text))
        node.replace_with(*replacements)

    logger.debug(
        f"Annotated {timed_total} words; cursor at {matcher.cursor.position}/{len(matcher.track)}"
    )
    return str(soup)


def resolve_slug(path: str, collection_name: str = "articles") -> str | None:
    """Derive a document slug from a content file path.

    Paths shaped like ``.../content/<collection>/<slug>.md`` (or ``.mdx``)
    yield ``<slug>``; any other markdown path falls back to its file stem.

    Returns:
        The slug, or ``None`` when the path is not a markdown file.
    """
    normalized = path.replace("\\", "/")
    match = re.search(rf"/content/{re.escape(collection_name)}/([^/]+)\.(md|mdx)$", normalized)
    if match:
        return match.group(1)
    match = re.search(r"(?:^|/)([^/]+)\.(md|mdx)$", normalized)
    return match.group(1) if match else None
