"""Project-wide constants for convenient reuse."""

# pylint: disable=line-too-long

from __future__ import annotations

import os
import sys
from typing import Final

from vocasync.utils.env_loader import load_project_env

# Ensure .env is loaded exactly once at import time for the whole project
if "pytest" not in sys.modules:
    load_project_env()


# Remote API endpoint and credentials
VOCASYNC_BASE_URL: Final[str] = os.getenv("VOCASYNC_BASE_URL", "https://vocasync.io/api/v1")
API_KEY_ENV_VAR: Final[str] = "VOCASYNC_API_KEY"

# Per-request HTTP timeout (seconds)
HTTP_TIMEOUT_SEC: Final[float] = float(os.getenv("HTTP_TIMEOUT_SEC", "30"))

# Job completion polling: attempt budget and delay between polls
POLL_MAX_ATTEMPTS: Final[int] = int(os.getenv("POLL_MAX_ATTEMPTS", "120"))
POLL_INTERVAL_SEC: Final[float] = float(os.getenv("POLL_INTERVAL_SEC", "5.0"))

# Extra polls tolerated after synthesis finished while no alignment job is
# linked yet. Heuristic; the remote API does not document its linking latency.
ALIGNMENT_GRACE_POLLS: Final[int] = int(os.getenv("ALIGNMENT_GRACE_POLLS", "5"))

# Consecutive failed polls (transport / malformed payload) tolerated before the
# error propagates. 0 = propagate the first failure.
MAX_POLL_FAILURES: Final[int] = int(os.getenv("MAX_POLL_FAILURES", "0"))

# Number of alignment entries scanned ahead of the cursor for each token
MATCH_LOOKAHEAD: Final[int] = int(os.getenv("MATCH_LOOKAHEAD", "10"))

# CSS class prefix for annotated word spans
CLASS_PREFIX: Final[str] = os.getenv("VOCASYNC_CLASS_PREFIX", "vocasync")

# Persistent slug -> artifact map
AUDIO_MAP_PATH: Final[str] = os.getenv("AUDIO_MAP_PATH", "./src/data/audio-map.json")
AUDIO_MAP_VERSION: Final[int] = 2

# Default project configuration file looked up in the working directory
CONFIG_FILENAME: Final[str] = os.getenv("VOCASYNC_CONFIG", "vocasync.toml")

# Documents synthesized concurrently during a sync run
DEFAULT_CONCURRENCY: Final[int] = int(os.getenv("SYNC_CONCURRENCY", "3"))

# Content files picked up from a collection directory
CONTENT_EXTENSIONS: Final[frozenset[str]] = frozenset({
    ".md",
    ".mdx",
    ".markdown",
})

# Elements whose text is never narrated and therefore never annotated
NON_NARRATED_TAGS: Final[frozenset[str]] = frozenset({
    "code",
    "pre",
    "script",
    "style",
    "svg",
    "math",
    "head",
    "title",
    "textarea",
    "noscript",
    "template",
})
NON_NARRATED_CLASSES: Final[frozenset[str]] = frozenset({
    "katex",
    "katex-mathml",
    "katex-html",
    "mjx-container",
})
