"""Synchronize a content collection with the remote synthesis service.

For every document: build its narratable text, skip it when the content hash
is unchanged, otherwise submit a synthesis job with linked alignment, wait for
a verdict, and record stable artifact URLs in the audio map. A failing
document becomes an ``error`` result; the batch always runs to the end.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Literal

from vocasync.api.client import VocaSyncClient, get_streaming_urls
from vocasync.config import VocaSyncConfig
from vocasync.content.loader import ContentItem, load_content
from vocasync.content.speech import build_speech_document, has_changed
from vocasync.errors import ContentError, VocaSyncError
from vocasync.jobs.models import CompositeJobView, PollPolicy
from vocasync.jobs.poller import JobStatusPoller
from vocasync.jobs.state_machine import await_completion
from vocasync.sync.audio_map import (
    AudioArtifact,
    AudioMap,
    get_entry,
    load_audio_map,
    save_audio_map,
    set_entry,
    utc_now,
)

logger = logging.getLogger(__name__)

__all__ = [
    "CheckResult",
    "SyncResult",
    "SyncSummary",
    "check_config",
    "sync_collection",
]

SyncStatus = Literal["unchanged", "new", "updated", "error"]
ProgressLevel = Literal["info", "success", "warn", "error"]
ProgressCallback = Callable[[str, ProgressLevel], None]

_LOG_LEVELS: dict[str, int] = {
    "info": logging.INFO,
    "success": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


@dataclass
class SyncResult:
    """Outcome of syncing a single document."""

    slug: str
    status: SyncStatus
    project_uuid: str | None = None
    error: str | None = None


@dataclass
class SyncSummary:
    """Counts and per-document results of one sync run."""

    total: int = 0
    unchanged: int = 0
    synced: int = 0
    errors: int = 0
    results: list[SyncResult] = field(default_factory=list)


@dataclass
class CheckResult:
    """Outcome of validating the API key and content collection."""

    valid: bool
    message: str
    balance: float | None = None


def _log_progress(message: str, level: ProgressLevel = "info") -> None:
    logger.log(_LOG_LEVELS.get(level, logging.INFO), message)


async def _process_item(
    item: ContentItem,
    config: VocaSyncConfig,
    client: VocaSyncClient,
    poller: JobStatusPoller,
    audio_map: AudioMap,
    *,
    force: bool,
    dry_run: bool,
    policy: PollPolicy | None,
    emit: ProgressCallback,
) -> SyncResult:
    try:
        speech = build_speech_document(item)
        existing = get_entry(audio_map, item.slug)
        changed = has_changed(existing.content_hash if existing else None, speech.hash)

        if existing is not None and not changed and not force:
            emit(f"{item.slug} - unchanged", "info")
            return SyncResult(slug=item.slug, status="unchanged")

        status: SyncStatus = "updated" if existing is not None else "new"
        if dry_run:
            emit(f"{item.slug} - would be {status} (dry run)", "info")
            return SyncResult(slug=item.slug, status=status)

        emit(f"{item.slug} - {status}, submitting...", "info")
        response = await client.synthesize(
            name=f"astro-{item.slug}",
            text=speech.text,
            voice=config.synthesis.voice,
            quality=config.synthesis.quality,
            language=config.language,
        )
        job_id = response.project_uuid
        emit(f"{item.slug} - processing ({job_id})...", "info")

        def _observe(view: CompositeJobView) -> None:
            alignment = view.alignment_status.value if view.alignment_status else "pending"
            logger.debug(
                f"{item.slug}: synth: {view.primary_status.value}, align: {alignment}"
            )

        verdict = await await_completion(poller, job_id, policy, observer=_observe)
        verdict.raise_for_failure()
        if not verdict.alignment_available:
            raise VocaSyncError("No alignment available for this document")

        track = await client.fetch_alignment(verdict.alignment_ref)
        urls = get_streaming_urls(job_id, client.base_url)
        now = utc_now()
        set_entry(
            audio_map,
            item.slug,
            AudioArtifact(
                project_uuid=job_id,
                content_hash=speech.hash,
                duration=track.duration,
                audio_url=urls["synthesis"],
                alignment_url=urls["alignment"],
                created_at=existing.created_at if existing else now,
                updated_at=now,
            ),
        )
        emit(f"{item.slug} - {status} complete", "success")
        return SyncResult(slug=item.slug, status=status, project_uuid=job_id)
    except Exception as exc:
        logger.debug(f"Sync of {item.slug} failed", exc_info=True)
        emit(f"{item.slug} - error: {exc}", "error")
        return SyncResult(slug=item.slug, status="error", error=str(exc))


async def sync_collection(
    config: VocaSyncConfig,
    client: VocaSyncClient,
    *,
    only: str | None = None,
    force: bool = False,
    dry_run: bool = False,
    on_progress: ProgressCallback | None = None,
    policy: PollPolicy | None = None,
) -> SyncSummary:
    """Synthesize and align every changed document of the collection.

    Args:
        config: Validated project configuration.
        client: Remote API client.
        only: Restrict the run to one slug.
        force: Reprocess unchanged documents too.
        dry_run: Report what would happen without remote calls or writes.
        on_progress: Callback receiving ``(message, level)`` updates.
        policy: Polling policy override.

    Returns:
        Summary with per-document results in collection order.

    Raises:
        ContentError: If the collection cannot be loaded or ``only`` matches
            no document.
    """
    emit = on_progress or _log_progress
    force = force or config.processing.force

    emit("Loading audio map...", "info")
    audio_map = load_audio_map(config.output.audio_map_path)

    emit(f"Loading content from {config.collection.name}...", "info")
    items = load_content(
        config.collection.path,
        slug_field=config.collection.slug_field,
        frontmatter_field=config.frontmatter_field,
    )
    if only:
        items = [item for item in items if item.slug == only]
        if not items:
            raise ContentError(f"No content found with slug: {only}")
    emit(f"Found {len(items)} content items", "info")

    poller = JobStatusPoller(client)
    semaphore = asyncio.Semaphore(config.processing.concurrency)

    async def _bounded(item: ContentItem) -> SyncResult:
        async with semaphore:
            return await _process_item(
                item,
                config,
                client,
                poller,
                audio_map,
                force=force,
                dry_run=dry_run,
                policy=policy,
                emit=emit,
            )

    results = list(await asyncio.gather(*(_bounded(item) for item in items)))

    summary = SyncSummary(total=len(items), results=results)
    for result in results:
        if result.status == "unchanged":
            summary.unchanged += 1
        elif result.status == "error":
            summary.errors += 1
        else:
            summary.synced += 1

    if not dry_run and summary.synced > 0:
        emit("Saving audio map...", "info")
        save_audio_map(config.output.audio_map_path, audio_map)

    return summary


async def check_config(config: VocaSyncConfig, client: VocaSyncClient) -> CheckResult:
    """Validate the API key and count the collection's documents."""
    try:
        valid, balance = await client.validate_api_key()
        if not valid:
            return CheckResult(
                valid=False,
                message="Invalid API key. Check your VOCASYNC_API_KEY environment variable.",
            )
        items = load_content(
            config.collection.path,
            slug_field=config.collection.slug_field,
            frontmatter_field=config.frontmatter_field,
        )
    except VocaSyncError as exc:
        return CheckResult(valid=False, message=f"Configuration error: {exc}")

    balance_text = f"${balance:.2f}" if balance is not None else "?"
    return CheckResult(
        valid=True,
        message=(
            f"Configuration valid. Found {len(items)} content items. Balance: {balance_text}."
        ),
        balance=balance,
    )
