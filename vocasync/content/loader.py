"""Load markdown documents and their frontmatter from a content collection."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from vocasync.errors import ContentError
from vocasync.utils.constant import CONTENT_EXTENSIONS

logger = logging.getLogger(__name__)

__all__ = [
    "ContentItem",
    "collect_files",
    "load_content",
    "parse_frontmatter",
]

_FRONTMATTER_RE = re.compile(r"^---\s*\n(.*?)\n---\s*(?:\n|$)", re.DOTALL)


@dataclass
class ContentItem:
    """A document loaded from a collection.

    Attributes:
        slug: Unique document identifier.
        content: Markdown body without frontmatter.
        frontmatter: Parsed frontmatter mapping.
        file_path: Path of the source file.
    """

    slug: str
    content: str
    frontmatter: dict[str, Any] = field(default_factory=dict)
    file_path: Path | None = None


def parse_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Split YAML frontmatter delimited by ``---`` lines from the body.

    Returns:
        ``(frontmatter, body)``; an empty mapping when there is none or it is
        not a YAML mapping.
    """
    match = _FRONTMATTER_RE.match(text)
    if not match:
        return {}, text
    try:
        data = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as exc:
        logger.warning(f"Ignoring invalid frontmatter: {exc}")
        data = {}
    if not isinstance(data, dict):
        data = {}
    return data, text[match.end() :]


def collect_files(directory: Path) -> list[Path]:
    """Recursively list content files under ``directory``, skipping hidden dirs."""
    files: list[Path] = []
    for root, dirs, names in os.walk(directory):
        dirs[:] = sorted(d for d in dirs if not d.startswith("."))
        for name in sorted(names):
            path = Path(root) / name
            if path.suffix.lower() in CONTENT_EXTENSIONS:
                files.append(path)
    return files


def load_content(
    path: str | Path,
    *,
    slug_field: str = "slug",
    frontmatter_field: str | None = None,
) -> list[ContentItem]:
    """Load every narratable document of a collection.

    Documents whose ``frontmatter_field`` is ``false`` and drafts are skipped.
    The slug comes from the ``slug_field`` frontmatter entry when it is a
    string, otherwise from the file stem.

    Args:
        path: Collection directory.
        slug_field: Frontmatter key holding an explicit slug.
        frontmatter_field: Optional opt-out key.

    Returns:
        Loaded items in path order.

    Raises:
        ContentError: If the directory does not exist.
    """
    directory = Path(path)
    if not directory.is_dir():
        raise ContentError(f"Content directory not found: {directory}")

    items: list[ContentItem] = []
    for file_path in collect_files(directory):
        frontmatter, body = parse_frontmatter(file_path.read_text(encoding="utf-8"))
        if frontmatter_field and frontmatter.get(frontmatter_field) is False:
            logger.debug(f"Skipping {file_path}: {frontmatter_field} is false")
            continue
        if frontmatter.get("draft") is True:
            logger.debug(f"Skipping draft {file_path}")
            continue
        explicit = frontmatter.get(slug_field)
        slug = explicit if isinstance(explicit, str) and explicit else file_path.stem
        items.append(
            ContentItem(slug=slug, content=body, frontmatter=frontmatter, file_path=file_path)
        )
    return items
