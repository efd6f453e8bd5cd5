"""Read-only view of the media already stored in the GitHub repository."""

from __future__ import annotations

import logging
import time

import httpx

from mediavault.exceptions import OtherRemoteError, RemoteError, error_for_status
from mediavault.schemas.files import RemoteFileEntry
from mediavault.services.github_api import GitHubApi
from mediavault.utils.filenames import extension_of, strip_extension
from mediavault.utils.retry import retry_async

logger = logging.getLogger(__name__)

AUDIO_MIME_TYPES = {
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "m4a": "audio/mp4",
    "aac": "audio/aac",
}
VIDEO_MIME_TYPES = {
    "mp4": "video/mp4",
    "webm": "video/webm",
    "avi": "video/x-msvideo",
    "mov": "video/quicktime",
}
THUMBNAIL_EXTENSIONS = {"jpg", "jpeg", "png", "webp"}

# Listing reads retry 404 and 5xx, which the contents API returns
# intermittently right after a write.
LISTING_ATTEMPTS = 3
LISTING_BASE_DELAY = 1.0
LISTING_MAX_DELAY = 5.0

_ACCESS_ERRORS = {
    401: "Invalid GitHub token or insufficient permissions",
    403: "GitHub API rate limit exceeded or repository access denied",
}


class _TransientResponse(Exception):
    def __init__(self, response: httpx.Response):
        self.response = response
        super().__init__(f"HTTP {response.status_code}")


def parse_remote_file(item: dict) -> RemoteFileEntry | None:
    """Entry for an audio/video item of a contents listing, else None."""
    name = item.get("name", "")
    ext = extension_of(name)
    if ext in AUDIO_MIME_TYPES:
        file_type, mime_type = "audio", AUDIO_MIME_TYPES[ext]
    elif ext in VIDEO_MIME_TYPES:
        file_type, mime_type = "video", VIDEO_MIME_TYPES[ext]
    else:
        return None

    return RemoteFileEntry(
        id=f"remote-{item['sha']}",
        name=name,
        type=file_type,
        mime_type=mime_type,
        size=item.get("size", 0),
        duration=0,
        created=int(time.time() * 1000),
        path=item.get("path"),
        sha=item["sha"],
        url=item.get("path"),
    )


class RemoteLibraryClient(GitHubApi):
    """Lists media and thumbnails in the configured repository."""

    async def fetch_remote_files(self) -> list[RemoteFileEntry]:
        self._config.ensure_complete()
        async with self._client() as client:
            await self._check_repository(client)
            listing = await self._list_directory(client, "list_media", self._config.media_path)

        files = [
            entry
            for entry in (parse_remote_file(item) for item in listing if item.get("type") == "file")
            if entry is not None
        ]
        logger.info("Fetched %d remote files", len(files))
        return files

    async def fetch_remote_thumbnails(self) -> dict[str, str]:
        """Thumbnail basename -> repository path."""
        self._config.ensure_complete()
        async with self._client() as client:
            listing = await self._list_directory(
                client, "list_thumbnails", self._config.thumbnail_path
            )

        thumbnails = {
            strip_extension(item["name"]): item["path"]
            for item in listing
            if item.get("type") == "file" and extension_of(item.get("name", "")) in THUMBNAIL_EXTENSIONS
        }
        logger.info("Fetched %d remote thumbnails", len(thumbnails))
        return thumbnails

    async def resolve_download_url(self, path: str) -> str:
        """Fresh download URL for ``path``; falls back to the raw URL."""
        self._config.ensure_complete()
        try:
            async with self._client() as client:
                data = await self._call(client, "download_url", "GET", self.contents_url(path))
            if data.get("download_url"):
                return data["download_url"]
        except RemoteError as e:
            logger.warning("Failed to get fresh download URL for %s: %s", path, e)
        return self.raw_url(path)

    def raw_url(self, path: str) -> str:
        cfg = self._config
        return f"https://raw.githubusercontent.com/{cfg.owner}/{cfg.repo}/{cfg.branch}/{path.lstrip('/')}"

    async def _get_with_retry(
        self, client: httpx.AsyncClient, step: str, url: str
    ) -> httpx.Response:
        async def attempt() -> httpx.Response:
            resp = await self._send(client, step, "GET", url)
            if resp.status_code == 404 or resp.status_code >= 500:
                raise _TransientResponse(resp)
            return resp

        try:
            return await retry_async(
                attempt,
                lambda e: isinstance(e, _TransientResponse),
                max_attempts=LISTING_ATTEMPTS,
                delay=LISTING_BASE_DELAY,
                backoff=2.0,
                max_delay=LISTING_MAX_DELAY,
                sleep=self._sleep,
            )
        except _TransientResponse as e:
            return e.response

    async def _check_repository(self, client: httpx.AsyncClient) -> None:
        resp = await self._get_with_retry(client, "check_repository", self.repo_url)
        if resp.is_success:
            return
        cfg = self._config
        if resp.status_code == 404:
            raise OtherRemoteError(
                "check_repository", 404,
                f"Repository '{cfg.owner}/{cfg.repo}' not found. "
                "Check the repository name and your access permissions.",
            )
        if resp.status_code in _ACCESS_ERRORS:
            raise OtherRemoteError("check_repository", resp.status_code, _ACCESS_ERRORS[resp.status_code])
        raise error_for_status("check_repository", resp.status_code, resp.text)

    async def _list_directory(
        self, client: httpx.AsyncClient, step: str, prefix: str
    ) -> list[dict]:
        resp = await self._get_with_retry(client, step, self.contents_url(prefix))
        if resp.status_code == 404:
            logger.info("Path %s not found in repository, treating as empty", prefix)
            return []
        if resp.status_code in _ACCESS_ERRORS:
            raise OtherRemoteError(step, resp.status_code, _ACCESS_ERRORS[resp.status_code])
        if not resp.is_success:
            raise error_for_status(step, resp.status_code, resp.text)

        data = resp.json()
        return data if isinstance(data, list) else []
