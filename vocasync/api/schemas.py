"""Pydantic schemas for raw VocaSync API payloads.

These models mirror the remote JSON shapes only; they are normalized into
internal types at a single boundary (``vocasync.jobs.poller``).
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from vocasync.jobs.models import JobStatus

ProjectType = Literal["alignment", "synthesis"]
ArtifactType = Literal["alignment", "synthesis"]


class _RemoteModel(BaseModel):
    """Base for remote payloads: camelCase aliases, unknown keys ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ArtifactResponse(_RemoteModel):
    """Artifact entry attached to a project."""

    id: str | None = None
    artifact_type: ArtifactType = Field(..., alias="artifactType")
    synthesis_file_key: str | None = Field(None, alias="synthesisFileKey")
    alignment_file_key: str | None = Field(None, alias="alignmentFileKey")


class LinkedAlignmentStatus(_RemoteModel):
    """Status of the alignment project chained after synthesis."""

    project_uuid: str | None = Field(None, alias="projectUuid")
    status: JobStatus
    error: str | None = None


class ProjectResponse(_RemoteModel):
    """Project payload returned by ``GET /projects/{uuid}``."""

    project_uuid: str = Field(..., alias="projectUuid")
    name: str | None = None
    project_type: ProjectType | None = Field(None, alias="projectType")
    status: JobStatus
    audio_file_duration_seconds: float | None = Field(None, alias="audioFileDurationSeconds")
    error: str | None = None
    artifacts: list[ArtifactResponse] = Field(default_factory=list)
    linked_alignment: LinkedAlignmentStatus | None = Field(None, alias="linkedAlignment")


class SynthesisResponse(_RemoteModel):
    """Response of ``POST /synthesis``."""

    project_uuid: str = Field(..., alias="projectUuid")
    estimated_cost: float | None = Field(None, alias="estimatedCost")


class AccountResponse(_RemoteModel):
    """Response of ``GET /account``."""

    balance: float | None = None
