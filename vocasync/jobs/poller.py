"""Job status polling and normalization of remote project payloads.

All knowledge of the remote project shape lives in :func:`normalize_project`;
everything downstream works with the closed :class:`CompositeJobView`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from vocasync.api.schemas import ProjectResponse
from vocasync.errors import MalformedResponseError
from vocasync.jobs.models import CompositeJobView, JobStatus

if TYPE_CHECKING:
    from vocasync.api.client import VocaSyncClient

logger = logging.getLogger(__name__)

__all__ = ["JobStatusPoller", "normalize_project"]


def normalize_project(payload: Any) -> CompositeJobView:
    """Map a raw project payload onto a :class:`CompositeJobView`.

    The project itself is the primary (synthesis) job. The alignment sub-job
    is the linked alignment project, absent until the remote links one.
    References are derived only for completed sub-jobs.

    Args:
        payload: Decoded JSON body of ``GET /projects/{uuid}``.

    Returns:
        Normalized snapshot of both sub-jobs.

    Raises:
        MalformedResponseError: If the payload cannot be normalized.
    """
    if not isinstance(payload, dict):
        raise MalformedResponseError("Project payload is not an object", payload)
    try:
        project = ProjectResponse.model_validate(payload)
    except ValidationError as exc:
        raise MalformedResponseError(
            f"Project payload has unexpected shape ({exc.error_count()} errors)", payload
        ) from exc

    job_id = project.project_uuid
    primary_status = project.status

    audio_ref = None
    if primary_status is JobStatus.COMPLETED:
        audio_ref = f"/stream/{job_id}/synthesis"

    alignment_status = None
    alignment_error = None
    alignment_ref = None
    if project.linked_alignment is not None:
        alignment_status = project.linked_alignment.status
        alignment_error = project.linked_alignment.error or None
        if alignment_status is JobStatus.COMPLETED:
            # The stream URL lives on the synthesis project.
            alignment_ref = f"/stream/{job_id}/alignment"

    return CompositeJobView(
        job_id=job_id,
        primary_status=primary_status,
        alignment_status=alignment_status,
        primary_error=project.error or None,
        alignment_error=alignment_error,
        audio_ref=audio_ref,
        alignment_ref=alignment_ref,
        name=project.name or "",
        duration=project.audio_file_duration_seconds,
    )


class JobStatusPoller:
    """Issues one status query per :meth:`poll` call; never retries."""

    def __init__(self, client: VocaSyncClient) -> None:
        self._client = client

    async def poll(self, job_id: str) -> CompositeJobView:
        """Query the remote status of ``job_id`` once.

        Raises:
            TransportError: On network or protocol failure.
            MalformedResponseError: If the payload cannot be normalized.
        """
        payload = await self._client.get_project(job_id)
        view = normalize_project(payload)
        logger.debug(
            f"Polled {job_id}: synthesis={view.primary_status.value}, "
            f"alignment={view.alignment_status.value if view.alignment_status else 'absent'}"
        )
        return view
