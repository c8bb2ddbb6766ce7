"""Shared test fixtures for the vocasync test suite."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from vocasync.jobs.models import CompositeJobView, JobStatus
from vocasync.timestamps.models import AlignedWord


@pytest.fixture(autouse=True)
def _isolate_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's real API key out of the tests."""
    monkeypatch.delenv("VOCASYNC_API_KEY", raising=False)


@pytest.fixture
def make_track() -> Callable[..., list[AlignedWord]]:
    """Return a factory building evenly spaced alignment words.

    Returns:
        Callable taking words (and an optional ``step``) and returning a track.
    """

    def _make(*words: str, step: float = 0.5) -> list[AlignedWord]:
        return [
            AlignedWord(word=word, start=round(i * step, 3), end=round((i + 1) * step, 3))
            for i, word in enumerate(words)
        ]

    return _make


@pytest.fixture
def make_view() -> Callable[..., CompositeJobView]:
    """Return a factory for composite job snapshots.

    Statuses are given as strings (``None`` for an unlinked alignment);
    references are filled in for completed sub-jobs like the real poller does.
    """

    def _make(
        primary: str,
        alignment: str | None = None,
        *,
        job_id: str = "job-1",
        primary_error: str | None = None,
        alignment_error: str | None = None,
    ) -> CompositeJobView:
        primary_status = JobStatus(primary)
        alignment_status = JobStatus(alignment) if alignment else None
        return CompositeJobView(
            job_id=job_id,
            primary_status=primary_status,
            alignment_status=alignment_status,
            primary_error=primary_error,
            alignment_error=alignment_error,
            audio_ref=(
                f"/stream/{job_id}/synthesis"
                if primary_status is JobStatus.COMPLETED
                else None
            ),
            alignment_ref=(
                f"/stream/{job_id}/alignment"
                if alignment_status is JobStatus.COMPLETED
                else None
            ),
        )

    return _make
