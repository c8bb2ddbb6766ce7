"""Unit tests for project configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from vocasync.config import VocaSyncConfig, load_config
from vocasync.errors import ConfigError

MINIMAL = """
[collection]
name = "articles"
path = "src/content/articles"
"""


def _write_config(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "vocasync.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_minimal_config_uses_defaults(tmp_path: Path) -> None:
    """Only the collection is required; everything else has defaults."""
    config = load_config(_write_config(tmp_path, MINIMAL))

    assert config.language == "en"
    assert config.synthesis.voice == "onyx"
    assert config.synthesis.quality == "sd"
    assert config.synthesis.format == "mp3"
    assert config.processing.concurrency == 3
    assert config.processing.force is False
    assert config.frontmatter_field is None


def test_relative_paths_resolve_against_config_dir(tmp_path: Path) -> None:
    """Collection and map paths are anchored at the config file location."""
    config = load_config(_write_config(tmp_path, MINIMAL))

    base = tmp_path.resolve()
    assert config.collection.path == base / "src" / "content" / "articles"
    assert config.output.audio_map_path == base / "src" / "data" / "audio-map.json"


def test_full_config(tmp_path: Path) -> None:
    """All sections are parsed and validated."""
    text = """
language = "de"
frontmatter_field = "narrate"

[collection]
name = "articles"
path = "src/content/articles"
slug_field = "permalink"

[synthesis]
voice = "nova"
quality = "hd"
format = "opus"

[output]
audio_map_path = "/abs/audio-map.json"

[processing]
concurrency = 5
force = true
"""

    config = load_config(_write_config(tmp_path, text))

    assert config.language == "de"
    assert config.frontmatter_field == "narrate"
    assert config.collection.slug_field == "permalink"
    assert config.synthesis.voice == "nova"
    assert config.synthesis.format == "opus"
    assert config.output.audio_map_path == Path("/abs/audio-map.json")
    assert config.processing.concurrency == 5
    assert config.processing.force is True


def test_missing_config_file(tmp_path: Path) -> None:
    """A missing file is reported as a configuration error."""
    with pytest.raises(ConfigError, match="No VocaSync configuration"):
        load_config(tmp_path / "vocasync.toml")


def test_default_path_is_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Without an explicit path the working directory is searched."""
    _write_config(tmp_path, MINIMAL)
    monkeypatch.chdir(tmp_path)
    assert load_config().collection.name == "articles"


@pytest.mark.parametrize(
    "text",
    [
        "[collection\nname = 1",
        "[collection]\nname = 'a'",
        MINIMAL + "\n[synthesis]\nvoice = 'robot'\n",
        MINIMAL + "\n[processing]\nconcurrency = 11\n",
        MINIMAL + "\n[processing]\nunknown = 1\n",
        'language = "xx"\n' + MINIMAL,
    ],
)
def test_invalid_configs_raise_config_error(tmp_path: Path, text: str) -> None:
    """Parse and validation errors are wrapped in ConfigError."""
    with pytest.raises(ConfigError):
        load_config(_write_config(tmp_path, text))


def test_model_defaults_without_file() -> None:
    """The top-level model can be built directly from a mapping."""
    config = VocaSyncConfig(collection={"name": "blog", "path": "content/blog"})
    assert config.collection.slug_field == "slug"
