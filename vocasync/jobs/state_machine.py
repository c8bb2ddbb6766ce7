"""Drive a remote composite job to a completion verdict.

The remote system creates the alignment job asynchronously after synthesis
completes, so "synthesis done, alignment absent" is an expected transient
state. It is bounded by a secondary grace window nested inside the overall
attempt budget.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

from vocasync.errors import MalformedResponseError, PollingTimeoutError, TransportError
from vocasync.jobs.models import CompositeJobView, JobStatus, PollPolicy, SubJob, Verdict

logger = logging.getLogger(__name__)

__all__ = [
    "JobCompletionStateMachine",
    "ProgressObserver",
    "StatusPoller",
    "await_completion",
]

ProgressObserver = Callable[[CompositeJobView], None]
Sleeper = Callable[[float], Awaitable[None]]


class StatusPoller(Protocol):
    """Anything that can produce one :class:`CompositeJobView` per call."""

    async def poll(self, job_id: str) -> CompositeJobView: ...


class JobCompletionStateMachine:
    """Polls one job until it succeeds, fails or runs out of attempts.

    Instances hold per-job counters and must not be shared between jobs.
    Polls are strictly sequential; cancelling the awaiting task at any tick
    boundary leaves no partial state behind.

    Attributes:
        attempts: Polls issued so far (including failed polls).
        grace_polls: Extra polls observed while synthesis was done and no
            alignment job was linked.
    """

    def __init__(
        self,
        poller: StatusPoller,
        policy: PollPolicy | None = None,
        *,
        observer: ProgressObserver | None = None,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self.poller = poller
        self.policy = policy or PollPolicy()
        self.observer = observer
        self._sleep = sleep
        self.attempts = 0
        self.grace_polls: int | None = None
        self._consecutive_failures = 0

    def _notify(self, view: CompositeJobView) -> None:
        if self.observer is None:
            return
        try:
            self.observer(view)
        except Exception:
            logger.exception(f"Progress observer failed for job {view.job_id}; ignoring")

    def evaluate(self, view: CompositeJobView) -> Verdict | None:
        """Apply the termination rules to one snapshot.

        A primary job that finished without ever linking an alignment is
        given ``alignment_grace_polls`` more snapshots. When that window
        runs out, a completed synthesis succeeds without alignment, while a
        failed synthesis ends as a synthesis failure carrying its error; a
        failed job is never reported as a success.

        Returns:
            A verdict when the job reached a terminal state, else ``None``.
        """
        if view.primary_done and view.alignment_done:
            self.grace_polls = None
            if view.primary_status is JobStatus.FAILED:
                return Verdict.failed(
                    view, SubJob.SYNTHESIS, view.primary_error or "Unknown error"
                )
            if view.alignment_status is JobStatus.FAILED:
                return Verdict.failed(
                    view, SubJob.ALIGNMENT, view.alignment_error or "Unknown error"
                )
            return Verdict.succeeded(view)

        if view.primary_done and not view.alignment_linked:
            if self.grace_polls is None:
                self.grace_polls = 0
            else:
                self.grace_polls += 1
            if self.grace_polls > self.policy.alignment_grace_polls:
                logger.info(
                    f"Job {view.job_id}: no alignment linked after "
                    f"{self.grace_polls} extra polls; treating alignment as unavailable"
                )
                if view.primary_status is JobStatus.FAILED:
                    return Verdict.failed(
                        view, SubJob.SYNTHESIS, view.primary_error or "Unknown error"
                    )
                return Verdict.succeeded(view, with_alignment=False)
            return None

        self.grace_polls = None
        return None

    async def _poll_once(self, job_id: str) -> CompositeJobView | None:
        try:
            view = await self.poller.poll(job_id)
        except (TransportError, MalformedResponseError) as exc:
            self._consecutive_failures += 1
            if self._consecutive_failures > self.policy.max_poll_failures:
                raise
            logger.warning(
                f"Poll {self.attempts} for job {job_id} failed "
                f"({self._consecutive_failures}/{self.policy.max_poll_failures} tolerated): {exc}"
            )
            return None
        self._consecutive_failures = 0
        return view

    async def run(self, job_id: str) -> Verdict:
        """Poll ``job_id`` until a verdict is reached.

        Returns:
            The final verdict.

        Raises:
            PollingTimeoutError: If the attempt budget is exhausted.
            TransportError: If polling fails more often than tolerated.
            MalformedResponseError: Likewise, for undecodable payloads.
        """
        policy = self.policy
        while self.attempts < policy.max_attempts:
            self.attempts += 1
            view = await self._poll_once(job_id)
            if view is not None:
                self._notify(view)
                verdict = self.evaluate(view)
                if verdict is not None:
                    logger.debug(
                        f"Job {job_id} finished after {self.attempts} polls: {verdict.outcome.value}"
                    )
                    return verdict
            if self.attempts < policy.max_attempts:
                await self._sleep(policy.interval_sec)

        raise PollingTimeoutError(job_id, self.attempts)


async def await_completion(
    poller: StatusPoller,
    job_id: str,
    policy: PollPolicy | None = None,
    *,
    observer: ProgressObserver | None = None,
    sleep: Sleeper = asyncio.sleep,
) -> Verdict:
    """Poll ``job_id`` with a fresh state machine and return its verdict.

    Args:
        poller: Status poller used for each tick.
        job_id: Remote job identifier.
        policy: Termination policy; library defaults when omitted.
        observer: Optional callback receiving every snapshot before the
            termination checks.
        sleep: Awaitable sleep used between polls.

    Returns:
        The final verdict.
    """
    machine = JobCompletionStateMachine(poller, policy, observer=observer, sleep=sleep)
    return await machine.run(job_id)
