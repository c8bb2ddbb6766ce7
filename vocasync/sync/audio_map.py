"""Persistent map from document slug to its resolved audio artifact."""

from __future__ import annotations

import logging
import pathlib
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from vocasync.utils.constant import AUDIO_MAP_VERSION

logger = logging.getLogger(__name__)

__all__ = [
    "AudioArtifact",
    "AudioMap",
    "get_entry",
    "load_audio_map",
    "remove_entry",
    "save_audio_map",
    "set_entry",
    "slugs",
]


def utc_now() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


class _MapModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AudioArtifact(_MapModel):
    """Resolved artifacts of one synthesized document.

    Both URLs are stable and do not expire.
    """

    project_uuid: str = Field(..., alias="projectUuid")
    content_hash: str = Field(..., alias="contentHash")
    duration: float = 0.0
    audio_url: str = Field(..., alias="audioUrl")
    alignment_url: str = Field(..., alias="alignmentUrl")
    publishable_key: str | None = Field(None, alias="publishableKey")
    created_at: str = Field(default_factory=utc_now, alias="createdAt")
    updated_at: str = Field(default_factory=utc_now, alias="updatedAt")


class AudioMap(_MapModel):
    """The ``audio-map.json`` document."""

    version: int = AUDIO_MAP_VERSION
    updated_at: str = Field(default_factory=utc_now, alias="updatedAt")
    entries: dict[str, AudioArtifact] = Field(default_factory=dict)


def load_audio_map(path: str | pathlib.Path) -> AudioMap:
    """Load the audio map, returning an empty map when the file is missing.

    An unreadable structure is logged and replaced by an empty map.
    """
    file_path = pathlib.Path(path)
    if not file_path.exists():
        return AudioMap()
    raw = file_path.read_text(encoding="utf-8")
    try:
        return AudioMap.model_validate_json(raw)
    except ValidationError:
        logger.warning(f"Invalid audio map structure at {file_path}, creating new")
        return AudioMap()


def save_audio_map(path: str | pathlib.Path, audio_map: AudioMap) -> None:
    """Write the audio map as pretty JSON, creating parent directories."""
    file_path = pathlib.Path(path)
    audio_map.updated_at = utc_now()
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(
        audio_map.model_dump_json(indent=2, by_alias=True, exclude_none=True) + "\n",
        encoding="utf-8",
    )


def get_entry(audio_map: AudioMap, slug: str) -> AudioArtifact | None:
    return audio_map.entries.get(slug)


def set_entry(audio_map: AudioMap, slug: str, artifact: AudioArtifact) -> None:
    audio_map.entries[slug] = artifact


def remove_entry(audio_map: AudioMap, slug: str) -> bool:
    """Remove ``slug``; return True when an entry was removed."""
    return audio_map.entries.pop(slug, None) is not None


def slugs(audio_map: AudioMap) -> list[str]:
    return list(audio_map.entries)
