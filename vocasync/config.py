"""Configuration models for a VocaSync project.

Settings are grouped into small validated models and loaded from a
``vocasync.toml`` file in the working directory (or an explicit path).
"""

from __future__ import annotations

import logging
import pathlib
import tomllib
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from vocasync.errors import ConfigError
from vocasync.utils.constant import AUDIO_MAP_PATH, CONFIG_FILENAME, DEFAULT_CONCURRENCY

logger = logging.getLogger(__name__)

Voice = Literal["alloy", "echo", "fable", "onyx", "nova", "shimmer"]
Quality = Literal["sd", "hd"]
AudioFormat = Literal["mp3", "opus", "aac", "flac"]
# Languages where both synthesis and forced alignment are available.
Language = Literal[
    "zh", "cs", "en", "fr", "de", "ja", "ko", "pl", "pt", "ru", "es", "sv", "tr", "uk"
]


class _ConfigModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class CollectionConfig(_ConfigModel):
    """Groups content collection settings.

    Attributes:
        name: Name of the content collection.
        path: Directory holding the collection's markdown files.
        slug_field: Frontmatter field used as unique slug.
    """

    name: str = Field(..., min_length=1)
    path: pathlib.Path
    slug_field: str = "slug"


class SynthesisConfig(_ConfigModel):
    """Groups speech synthesis settings.

    Attributes:
        voice: TTS voice.
        quality: Audio quality.
        format: Output audio format.
    """

    voice: Voice = "onyx"
    quality: Quality = "sd"
    format: AudioFormat = "mp3"


class OutputConfig(_ConfigModel):
    """Groups output paths.

    Attributes:
        audio_map_path: Location of the persistent slug -> artifact map.
    """

    audio_map_path: pathlib.Path = Field(default_factory=lambda: pathlib.Path(AUDIO_MAP_PATH))


class ProcessingConfig(_ConfigModel):
    """Groups batch processing settings.

    Attributes:
        concurrency: Number of documents synthesized at the same time.
        force: Reprocess documents even when their content is unchanged.
    """

    concurrency: int = Field(default=DEFAULT_CONCURRENCY, ge=1, le=10)
    force: bool = False


class VocaSyncConfig(_ConfigModel):
    """Top-level project configuration.

    Examples:
        >>> config = VocaSyncConfig(collection={"name": "articles", "path": "content"})
        >>> config.synthesis.voice
        'onyx'
    """

    collection: CollectionConfig
    language: Language = "en"
    synthesis: SynthesisConfig = Field(default_factory=SynthesisConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    frontmatter_field: str | None = None
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)


def load_config(path: str | pathlib.Path | None = None) -> VocaSyncConfig:
    """Load and validate the project configuration.

    Relative paths inside the file are resolved against the file's directory.

    Args:
        path: Explicit config file; defaults to ``vocasync.toml`` in the
            current working directory.

    Returns:
        The validated configuration.

    Raises:
        ConfigError: If the file is missing, unparsable or invalid.
    """
    config_path = pathlib.Path(path) if path else pathlib.Path.cwd() / CONFIG_FILENAME
    if not config_path.is_file():
        raise ConfigError(
            f"No VocaSync configuration found at {config_path}. "
            f"Create a {CONFIG_FILENAME} file with your configuration."
        )

    try:
        with config_path.open("rb") as fp:
            data = tomllib.load(fp)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse {config_path}: {exc}") from exc

    try:
        config = VocaSyncConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {config_path}:\n{exc}") from exc

    base = config_path.resolve().parent
    if not config.collection.path.is_absolute():
        config.collection.path = base / config.collection.path
    if not config.output.audio_map_path.is_absolute():
        config.output.audio_map_path = base / config.output.audio_map_path
    logger.debug(f"Loaded configuration from {config_path}")
    return config
