"""Status, snapshot and verdict types for remote composite jobs.

A composite job is a primary speech-synthesis job plus an optionally linked
forced-alignment job that the remote system chains after synthesis finishes.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from vocasync.errors import JobFailedError
from vocasync.utils.constant import (
    ALIGNMENT_GRACE_POLLS,
    MAX_POLL_FAILURES,
    POLL_INTERVAL_SEC,
    POLL_MAX_ATTEMPTS,
)

__all__ = [
    "CompositeJobView",
    "JobStatus",
    "Outcome",
    "PollPolicy",
    "SubJob",
    "Verdict",
]


class JobStatus(str, enum.Enum):  # noqa: UP042
    """Status of a remote sub-job.

    Attributes:
        PENDING: Job created but not yet started.
        PROCESSING: Job currently executing remotely.
        COMPLETED: Job finished successfully.
        FAILED: Job failed with error.
    """

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Whether the status is final (completed or failed)."""
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


class SubJob(str, enum.Enum):  # noqa: UP042
    """Identifies which half of a composite job a failure belongs to."""

    SYNTHESIS = "synthesis"
    ALIGNMENT = "alignment"


@dataclass(frozen=True)
class CompositeJobView:
    """Snapshot of a remote composite job at one poll instant.

    Attributes:
        job_id: Stable identifier of the primary (synthesis) project.
        primary_status: Status of the synthesis sub-job.
        alignment_status: Status of the linked alignment sub-job, or ``None``
            while no alignment job is linked.
        primary_error: Remote error message of the synthesis sub-job.
        alignment_error: Remote error message of the alignment sub-job.
        audio_ref: Stable audio reference, set only once synthesis completed.
        alignment_ref: Stable alignment reference, set only once alignment
            completed.
        name: Human-readable project name.
        duration: Audio duration in seconds when known.
    """

    job_id: str
    primary_status: JobStatus
    alignment_status: JobStatus | None = None
    primary_error: str | None = None
    alignment_error: str | None = None
    audio_ref: str | None = None
    alignment_ref: str | None = None
    name: str = ""
    duration: float | None = None

    @property
    def primary_done(self) -> bool:
        return self.primary_status.is_terminal

    @property
    def alignment_done(self) -> bool:
        return self.alignment_status is not None and self.alignment_status.is_terminal

    @property
    def alignment_linked(self) -> bool:
        return self.alignment_status is not None


@dataclass(frozen=True)
class PollPolicy:
    """Termination policy for the job completion state machine.

    Attributes:
        max_attempts: Total number of polls before giving up.
        interval_sec: Delay between consecutive polls.
        alignment_grace_polls: Extra polls allowed after synthesis finished
            while no alignment job is linked.
        max_poll_failures: Consecutive failed polls tolerated before the
            failure propagates to the caller.
    """

    max_attempts: int = POLL_MAX_ATTEMPTS
    interval_sec: float = POLL_INTERVAL_SEC
    alignment_grace_polls: int = ALIGNMENT_GRACE_POLLS
    max_poll_failures: int = MAX_POLL_FAILURES

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.interval_sec < 0:
            raise ValueError("interval_sec must be non-negative")
        if self.alignment_grace_polls < 0:
            raise ValueError("alignment_grace_polls must be non-negative")
        if self.max_poll_failures < 0:
            raise ValueError("max_poll_failures must be non-negative")


class Outcome(str, enum.Enum):  # noqa: UP042
    """Terminal outcome of a composite job."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class Verdict:
    """Final verdict returned by the job completion state machine.

    A succeeded verdict with ``alignment_ref=None`` means synthesis finished
    but no alignment job was ever linked; callers treat that as "no alignment
    available" rather than as an error.

    Attributes:
        outcome: Succeeded or failed.
        view: Last observed snapshot.
        audio_ref: Stable audio reference on success.
        alignment_ref: Stable alignment reference, if alignment is available.
        failed_subjob: Sub-job responsible for a failure.
        reason: Failure message.
    """

    outcome: Outcome
    view: CompositeJobView
    audio_ref: str | None = None
    alignment_ref: str | None = None
    failed_subjob: SubJob | None = None
    reason: str | None = None

    @classmethod
    def succeeded(cls, view: CompositeJobView, *, with_alignment: bool = True) -> Verdict:
        return cls(
            outcome=Outcome.SUCCEEDED,
            view=view,
            audio_ref=view.audio_ref,
            alignment_ref=view.alignment_ref if with_alignment else None,
        )

    @classmethod
    def failed(cls, view: CompositeJobView, subjob: SubJob, reason: str) -> Verdict:
        return cls(outcome=Outcome.FAILED, view=view, failed_subjob=subjob, reason=reason)

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SUCCEEDED

    @property
    def alignment_available(self) -> bool:
        return self.ok and self.alignment_ref is not None

    def raise_for_failure(self) -> Verdict:
        """Raise :class:`JobFailedError` for a failed verdict.

        Returns:
            The verdict itself when it succeeded, for chaining.

        Raises:
            JobFailedError: If the verdict is a failure.
        """
        if not self.ok:
            subjob = self.failed_subjob.value if self.failed_subjob else "job"
            raise JobFailedError(subjob, self.reason or "Unknown error")
        return self
