"""Unit tests for remote project normalization and the status poller."""

from __future__ import annotations

import asyncio

import pytest

from vocasync.errors import MalformedResponseError
from vocasync.jobs.models import JobStatus
from vocasync.jobs.poller import JobStatusPoller, normalize_project


def _payload(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "projectUuid": "abc-123",
        "name": "astro-hello",
        "projectType": "synthesis",
        "status": "processing",
        "artifacts": [],
    }
    payload.update(overrides)
    return payload


def test_processing_project_without_alignment() -> None:
    """A running synthesis has no references and no alignment status."""
    view = normalize_project(_payload())

    assert view.job_id == "abc-123"
    assert view.primary_status is JobStatus.PROCESSING
    assert view.alignment_status is None
    assert view.audio_ref is None
    assert view.alignment_ref is None
    assert not view.primary_done
    assert not view.alignment_linked


def test_completed_project_with_completed_alignment() -> None:
    """Both references are derived once both sub-jobs completed."""
    view = normalize_project(
        _payload(
            status="completed",
            audioFileDurationSeconds=42.5,
            linkedAlignment={"projectUuid": "align-9", "status": "completed"},
        )
    )

    assert view.audio_ref == "/stream/abc-123/synthesis"
    assert view.alignment_ref == "/stream/abc-123/alignment"
    assert view.duration == 42.5
    assert view.primary_done and view.alignment_done


def test_alignment_reference_requires_completed_alignment() -> None:
    """A linked but running alignment has a status and no reference."""
    view = normalize_project(
        _payload(status="completed", linkedAlignment={"status": "processing"})
    )

    assert view.alignment_status is JobStatus.PROCESSING
    assert view.alignment_ref is None
    assert view.audio_ref is not None


def test_errors_are_carried_over() -> None:
    """Remote error messages land on the matching sub-job."""
    view = normalize_project(
        _payload(
            status="failed",
            error="voice unavailable",
            linkedAlignment={"status": "failed", "error": "no audio"},
        )
    )

    assert view.primary_error == "voice unavailable"
    assert view.alignment_error == "no audio"


def test_unknown_fields_are_ignored() -> None:
    """Extra remote keys do not break normalization."""
    view = normalize_project(_payload(newRemoteField={"x": 1}))
    assert view.job_id == "abc-123"


@pytest.mark.parametrize(
    "payload",
    [
        None,
        [],
        "completed",
        {"status": "completed"},
        _payload(status="exploded"),
        _payload(linkedAlignment={"status": 7}),
    ],
)
def test_malformed_payloads_are_rejected(payload: object) -> None:
    """Anything that is not a well-formed project raises MalformedResponseError."""
    with pytest.raises(MalformedResponseError):
        normalize_project(payload)


def test_poller_issues_exactly_one_query() -> None:
    """Each poll performs one client call and normalizes the result."""

    class FakeClient:
        def __init__(self) -> None:
            self.requested: list[str] = []

        async def get_project(self, job_id: str) -> dict[str, object]:
            self.requested.append(job_id)
            return _payload(projectUuid=job_id, status="pending")

    client = FakeClient()
    view = asyncio.run(JobStatusPoller(client).poll("job-7"))

    assert client.requested == ["job-7"]
    assert view.primary_status is JobStatus.PENDING
