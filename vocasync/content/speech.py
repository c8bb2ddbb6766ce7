"""Turn markdown documents into the linear text that gets narrated."""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from pathlib import Path

import markdown
from bs4 import BeautifulSoup, NavigableString, Tag

from vocasync.content.loader import ContentItem

__all__ = [
    "SpeechDocument",
    "build_speech_document",
    "compute_hash",
    "has_changed",
    "markdown_to_speech",
]

_HEADINGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})
_SKIPPED = frozenset({"script", "style", "svg", "math"})
_MIN_INLINE_CODE_CHARS = 10


@dataclass(frozen=True)
class SpeechDocument:
    """Narratable text of one document plus its change-detection hash."""

    slug: str
    text: str
    hash: str
    source: Path | None = None


def compute_hash(content: str) -> str:
    """Return the SHA-256 hex digest of ``content``."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def has_changed(old_hash: str | None, new_hash: str) -> bool:
    """Return True when the stored hash differs from the new one."""
    return old_hash != new_hash


def _code_language(pre: Tag) -> str | None:
    code = pre.find("code")
    if not isinstance(code, Tag):
        return None
    for cls in code.get("class") or []:
        if cls.startswith("language-"):
            return cls[len("language-") :] or None
    return None


def _walk(node: Tag, parts: list[str]) -> None:
    for child in node.children:
        if isinstance(child, NavigableString):
            if type(child) is NavigableString:
                parts.append(str(child))
            continue
        if not isinstance(child, Tag):
            continue

        name = child.name
        if name in _SKIPPED:
            continue
        if name == "pre":
            language = _code_language(child)
            if language:
                parts.append(f"[Code in {language}]")
        elif name == "code":
            code_text = child.get_text()
            if len(code_text) > _MIN_INLINE_CODE_CHARS:
                parts.append(code_text)
        elif name in _HEADINGS:
            parts.append("\n# ")
            _walk(child, parts)
            parts.append("\n")
        elif name == "p":
            _walk(child, parts)
            parts.append("\n")
        elif name == "li":
            _walk(child, parts)
            parts.append(". ")
        elif name == "blockquote":
            parts.append("Quote: ")
            _walk(child, parts)
            parts.append(" End quote.")
        elif name == "img":
            alt = child.get("alt")
            if alt:
                parts.append(f"Image: {alt}")
        elif name == "hr":
            parts.append("\n\n")
        else:
            _walk(child, parts)


def markdown_to_speech(body: str) -> str:
    """Flatten a markdown body into narratable text.

    Headings, paragraphs, list items, block quotes and image alt texts are
    spoken; fenced code with a language is announced as ``[Code in LANG]``
    and otherwise dropped; inline code is kept only when longer than ten
    characters. Whitespace collapses to single spaces.
    """
    html = markdown.markdown(body, extensions=["fenced_code", "tables"])
    soup = BeautifulSoup(html, "html.parser")
    parts: list[str] = []
    _walk(soup, parts)
    text = "".join(parts)
    text = re.sub(r"\s+", " ", text)
    text = re.sub(r"\s*\.\s*\.", ".", text)
    return text.strip()


def build_speech_document(item: ContentItem) -> SpeechDocument:
    """Build the speech document (text + hash) for a content item."""
    text = markdown_to_speech(item.content)
    return SpeechDocument(
        slug=item.slug,
        text=text,
        hash=compute_hash(text),
        source=item.file_path,
    )
