"""Async HTTP client for the VocaSync synthesis and alignment API."""

from __future__ import annotations

import logging
import os
from typing import Any

import httpx
from pydantic import ValidationError

from vocasync.api.schemas import AccountResponse, SynthesisResponse
from vocasync.errors import ConfigError, MalformedResponseError, TransportError
from vocasync.timestamps.models import AlignmentTrack
from vocasync.utils.constant import API_KEY_ENV_VAR, HTTP_TIMEOUT_SEC, VOCASYNC_BASE_URL

logger = logging.getLogger(__name__)

_BODY_SNIPPET_CHARS = 500


def get_streaming_urls(job_id: str, base_url: str = VOCASYNC_BASE_URL) -> dict[str, str]:
    """Return stable streaming URLs for a project.

    These URLs do not expire; the remote redirects them to fresh presigned
    URLs on every request.

    Args:
        job_id: Project identifier.
        base_url: API base URL.

    Returns:
        Mapping with ``synthesis``, ``alignment``, ``srt`` and ``vtt`` URLs.
    """
    root = f"{base_url.rstrip('/')}/stream/{job_id}"
    return {
        "synthesis": f"{root}/synthesis",
        "alignment": f"{root}/alignment",
        "srt": f"{root}/subtitles.srt",
        "vtt": f"{root}/subtitles.vtt",
    }


class VocaSyncClient:
    """Thin async wrapper around the VocaSync REST API.

    Every network or HTTP-status failure surfaces as :class:`TransportError`;
    payloads that cannot be decoded surface as :class:`MalformedResponseError`.
    The client never retries.

    Examples:
        >>> async with VocaSyncClient("key") as client:
        ...     payload = await client.get_project("uuid")
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = VOCASYNC_BASE_URL,
        *,
        timeout: float = HTTP_TIMEOUT_SEC,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise ConfigError("API key is required")
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
            },
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self) -> VocaSyncClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            detail = (exc.response.text or "").strip()[:_BODY_SNIPPET_CHARS]
            raise TransportError(
                f"API request failed: {status} {exc.response.reason_phrase}",
                status_code=status,
                body=detail or None,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"API request failed: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError(
                f"{method} {url} returned a non-JSON body",
                payload=response.text[:_BODY_SNIPPET_CHARS],
            ) from exc

    async def synthesize(
        self,
        *,
        name: str,
        text: str,
        voice: str,
        quality: str,
        language: str,
    ) -> SynthesisResponse:
        """Create a synthesis project with a linked alignment project.

        The ``align=true`` flag makes the remote chain an alignment project
        that starts once synthesis completes.

        Args:
            name: Project name shown in the remote dashboard.
            text: Narratable text to synthesize.
            voice: Voice identifier.
            quality: ``"sd"`` or ``"hd"``.
            language: ISO-639-1 language code.

        Returns:
            Parsed synthesis response holding the project identifier.
        """
        fields = {
            "textType": "text",
            "text": text,
            "voice": voice,
            "quality": quality,
            "language": language,
            "projectName": name,
            "align": "true",
        }
        # (None, value) entries force a multipart/form-data body without files.
        form = {key: (None, value) for key, value in fields.items()}
        payload = await self._request("POST", "/synthesis", files=form)
        try:
            return SynthesisResponse.model_validate(payload)
        except ValidationError as exc:
            raise MalformedResponseError("Unexpected synthesis response", payload) from exc

    async def get_project(self, job_id: str) -> Any:
        """Fetch the raw project payload for ``job_id``."""
        return await self._request("GET", f"/projects/{job_id}")

    async def fetch_alignment(self, alignment_ref: str) -> AlignmentTrack:
        """Fetch the timestamped word list behind an alignment reference.

        Args:
            alignment_ref: Absolute URL or path relative to the API base URL.

        Returns:
            The alignment track (words and total duration).
        """
        payload = await self._request("GET", alignment_ref)
        if not isinstance(payload, dict) or not isinstance(payload.get("words"), list):
            raise MalformedResponseError("Alignment payload has no 'words' list", payload)
        try:
            return AlignmentTrack(
                words=payload["words"],
                duration=payload.get("duration") or 0.0,
            )
        except ValidationError as exc:
            raise MalformedResponseError("Invalid alignment words", payload) from exc

    async def fetch_alignment_for(self, job_id: str) -> AlignmentTrack:
        """Fetch the alignment track of a project through its stable stream URL."""
        return await self.fetch_alignment(get_streaming_urls(job_id, self.base_url)["alignment"])

    async def validate_api_key(self) -> tuple[bool, float | None]:
        """Check API key validity and account balance.

        Returns:
            ``(valid, balance)``; an invalid key yields ``(False, None)``.
        """
        try:
            payload = await self._request("GET", "/account")
        except TransportError as exc:
            if exc.status_code == 401:
                return False, None
            raise
        try:
            account = AccountResponse.model_validate(payload)
        except ValidationError as exc:
            raise MalformedResponseError("Unexpected account response", payload) from exc
        return True, account.balance


def create_client(api_key: str | None = None, base_url: str = VOCASYNC_BASE_URL) -> VocaSyncClient:
    """Create a client from an explicit key or the environment.

    Raises:
        ConfigError: If no API key is configured.
    """
    key = api_key or os.getenv(API_KEY_ENV_VAR)
    if not key:
        raise ConfigError(
            f"{API_KEY_ENV_VAR} environment variable is not set. "
            "Get your API key at https://vocasync.io and add it to your .env file."
        )
    logger.debug(f"Creating VocaSync client for {base_url}")
    return VocaSyncClient(key, base_url)
