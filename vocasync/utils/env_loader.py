"""Utility for loading project-level environment variables.

The `.env` file sitting in the current working directory is loaded with
`python-dotenv` *early* in the application lifecycle so that the API key and
polling overrides are visible to `vocasync.utils.constant`.

Usage (call as soon as possible in your CLI / entry-point):

    from vocasync.utils.env_loader import load_project_env
    load_project_env()

Re-invocation is a no-op unless ``force=True`` is passed.
"""

from __future__ import annotations

import functools
import pathlib
from collections.abc import Callable
from typing import Any, Final

from dotenv import load_dotenv

_ENV_FILE: Final[pathlib.Path] = pathlib.Path.cwd() / ".env"
LOAD_DOTENV: Final[Callable[..., Any]] = load_dotenv


@functools.lru_cache(maxsize=1)
def _load_once() -> None:
    if not _ENV_FILE.exists():
        # Nothing to load – silently return.
        return

    # `override=False` ensures we do **not** clobber env-vars already set
    # by the user / shell.
    LOAD_DOTENV(dotenv_path=_ENV_FILE, override=False)


def load_project_env(force: bool = False) -> None:
    """Load the project-level `.env` file into the process environment.

    The file is read only once per process. Variables already present in the
    environment are never overridden.

    Args:
        force: If True, forget the previous load and read the file again.
            Defaults to False.

    """
    if force:
        _load_once.cache_clear()
    _load_once()


__all__ = [
    "load_project_env",
]
