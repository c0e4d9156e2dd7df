"""
Google Drive client for listing folder contents and downloading CSV data.

Every outbound call goes through the shared RetryManager, so each request is
bounded by the policy timeout and retried with backoff before it is reported
as a strategy failure.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, Protocol

import aiohttp

from campaign_sync.drive.strategies import (
    DRIVE_FILES_ENDPOINT,
    LISTING_STRATEGIES,
    ListingStrategy,
    build_listing_request,
    build_metadata_request,
    download_requests,
)
from campaign_sync.drive.types import DriveFile, RequestSpec
from campaign_sync.exceptions import (
    ConfigurationError,
    DriveDownloadError,
    DriveHTTPError,
    DriveListingError,
    ShortcutResolutionError,
)
from campaign_sync.retry import NETWORK_EXCEPTIONS, RetryManager, RetryPolicy
from campaign_sync.utils.logging import get_logger

logger = get_logger("campaign_sync.drive")


class DriveClient(Protocol):
    """What the coordinator needs from a remote file store."""

    async def list_files_in_folder(self, folder_id: str) -> list[DriveFile]: ...

    async def download_file(self, file: DriveFile) -> str: ...


class GoogleDriveClient:
    """
    Drive v3 client authenticated with an API key.

    Usable as an async context manager; the aiohttp session is created lazily
    and closed on exit unless it was supplied by the caller.

    Example:
        async with GoogleDriveClient(api_key) as drive:
            files = await drive.list_files_in_folder(folder.id)
            content = await drive.download_file(files[0])
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        retry_policy: RetryPolicy | None = None,
        session: aiohttp.ClientSession | None = None,
        endpoint: str = DRIVE_FILES_ENDPOINT,
        listing_strategies: list[ListingStrategy] | None = None,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ):
        if not api_key:
            raise ConfigurationError("GOOGLE_API_KEY is required to access Google Drive folders.")
        self.api_key = api_key
        self.endpoint = endpoint.rstrip("/")
        self.listing_strategies = listing_strategies or LISTING_STRATEGIES
        self.retry = RetryManager(retry_policy, sleep=sleep)
        self.session = session
        self._owns_session = session is None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession()
            self._owns_session = True
        return self.session

    async def __aenter__(self) -> GoogleDriveClient:
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self.session is not None and not self.session.closed:
            await self.session.close()
        if self._owns_session:
            self.session = None

    async def list_files_in_folder(self, folder_id: str) -> list[DriveFile]:
        """
        List all non-trashed files in a folder, following page tokens.

        Strategies are tried in order; the first one that pages through to
        the end wins, even if the folder is empty. Raises DriveListingError
        only when every strategy has failed.
        """
        failures: list[str] = []

        for strategy in self.listing_strategies:
            try:
                files = await self._list_with_strategy(folder_id, strategy)
            except (*NETWORK_EXCEPTIONS, ValueError) as e:
                failures.append(f"{strategy.label}: {_describe(e)}")
                logger.warning(
                    f"Drive listing of folder {folder_id} failed with strategy {strategy.label}, "
                    f"trying next strategy: {_describe(e)}"
                )
                continue

            logger.debug(f"Listed {len(files)} files in folder {folder_id} using {strategy.label}")
            return files

        raise DriveListingError(folder_id, failures)

    async def _list_with_strategy(self, folder_id: str, strategy: ListingStrategy) -> list[DriveFile]:
        files: list[DriveFile] = []
        page_token: str | None = None

        while True:
            request = build_listing_request(strategy, folder_id, self.api_key, page_token, self.endpoint)
            payload = await self._request(request, as_json=True, operation=f"list {folder_id} ({strategy.label})")
            if not isinstance(payload, dict):
                raise ValueError(f"Unexpected listing response: {payload!r:.200}")
            files.extend(DriveFile.from_api(item) for item in payload.get("files") or [])
            page_token = payload.get("nextPageToken")
            if not page_token:
                return files

    async def download_file(self, file: DriveFile) -> str:
        """
        Download a file's content as text.

        Shortcuts are resolved one level to their target first. Native
        spreadsheets are exported as CSV; everything else is downloaded as-is.
        """
        resolved = await self.resolve_shortcut(file)
        failures: list[str] = []

        for request in download_requests(resolved, self.api_key, self.endpoint):
            try:
                return await self._request(request, as_json=False, operation=f"download {file.name} ({request.label})")
            except NETWORK_EXCEPTIONS as e:
                failures.append(f"{request.label}: {_describe(e)}")
                logger.warning(f"Download of {file.name} via {request.label} failed: {_describe(e)}")

        raise DriveDownloadError(file.name, failures)

    async def resolve_shortcut(self, file: DriveFile) -> DriveFile:
        """
        Return the shortcut's target (keeping the shortcut's name), or the file itself.

        Only one level of indirection is followed.
        """
        if not file.is_shortcut:
            return file

        target = file.shortcut_target
        if target is None:
            target = (await self.fetch_file_metadata(file.id)).shortcut_target

        if target is None or not target.id:
            raise ShortcutResolutionError(
                f"Shortcut {file.name} does not include target details.", details={"file_id": file.id}
            )

        mime_type = target.mime_type
        if not mime_type:
            mime_type = (await self.fetch_file_metadata(target.id)).mime_type

        resolved = DriveFile(id=target.id, name=file.name, mime_type=mime_type)
        if resolved.is_shortcut:
            logger.warning(f"Shortcut {file.name} points at another shortcut; nested shortcuts are not followed")
        return resolved

    async def fetch_file_metadata(self, file_id: str) -> DriveFile:
        request = build_metadata_request(file_id, self.api_key, self.endpoint)
        try:
            payload = await self._request(request, as_json=True, operation=f"metadata {file_id}")
            return DriveFile.from_api(payload)
        except ValueError as e:
            raise ShortcutResolutionError(
                f"Metadata for file {file_id} could not be read: {_describe(e)}", details={"file_id": file_id}
            ) from e

    async def _request(self, request: RequestSpec, *, as_json: bool, operation: str) -> Any:
        session = await self._ensure_session()

        async def attempt() -> Any:
            async with session.get(request.url, params=request.params) as response:
                if not 200 <= response.status < 300:
                    body = await _safe_text(response)
                    raise DriveHTTPError(response.status, str(response.url), response.reason or "", body)
                if as_json:
                    return await response.json(content_type=None)
                return await response.text(errors="replace")

        return await self.retry.execute(attempt, operation=operation)


async def _safe_text(response: aiohttp.ClientResponse) -> str:
    try:
        return (await response.text(errors="replace")).strip()
    except aiohttp.ClientError:
        return ""


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__
