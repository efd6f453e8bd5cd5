"""Write one file into a GitHub repository as exactly one commit.

Existing repositories go through the git data API:

    resolve ref -> base tree -> blob -> tree -> commit -> update ref

The ref update is never forced, so a branch that moved since the head was
read fails with 409/422. That failure restarts the whole sequence from the
ref lookup, because the new commit's parent must be the current head.

Repositories without a commit on the branch have no tree to extend; there a
single contents-API PUT creates the file and the first commit.

Blobs created by a failed attempt are left behind as unreachable objects.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Union

import httpx

from mediavault.exceptions import OtherRemoteError, is_retryable
from mediavault.schemas.sync import UploadKind, UploadResult
from mediavault.services.github_api import GitHubApi
from mediavault.utils.encoding import encode_base64
from mediavault.utils.retry import retry_async

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]

REGULAR_FILE_MODE = "100644"


# --- Branch head lookup result ---


@dataclass(frozen=True)
class RefFound:
    commit_sha: str


@dataclass(frozen=True)
class EmptyRepository:
    """Branch missing, or the repository has no commits yet (404/409)."""
    status: int


@dataclass(frozen=True)
class RefFailed:
    status: int
    body: str


RefLookup = Union[RefFound, EmptyRepository, RefFailed]


class RemoteSyncClient(GitHubApi):
    """Uploads media and thumbnails to the configured repository."""

    async def upload(
        self,
        content: bytes,
        on_progress: ProgressCallback | None = None,
        name: str | None = None,
        kind: UploadKind = "media",
    ) -> UploadResult:
        """Commit ``content`` under the media (or thumbnail) prefix.

        Progress is reported as coarse protocol milestones in [0, 1], not
        bytes transferred. Raises ConfigurationMissing before any request
        when the token or repository is not set.
        """
        self._config.ensure_complete()

        file_name = name or f"media-{int(time.time() * 1000)}"
        path = self._config.path_for(kind, file_name)
        report = on_progress or (lambda _p: None)
        attempts = 0

        async with self._client() as client:

            async def attempt() -> UploadResult:
                nonlocal attempts
                attempts += 1
                logger.info(
                    "Uploading %s (%d bytes), attempt %d/%d",
                    path, len(content), attempts, self._config.max_attempts,
                )
                return await self._write(client, content, path, file_name, report)

            result = await retry_async(
                attempt,
                is_retryable,
                max_attempts=self._config.max_attempts,
                delay=self._config.retry_delay,
                sleep=self._sleep,
            )

        result.attempts = attempts
        logger.info("Upload of %s complete after %d attempt(s)", path, attempts)
        return result

    async def upload_thumbnail(
        self,
        content: bytes,
        on_progress: ProgressCallback | None = None,
        name: str | None = None,
    ) -> UploadResult:
        return await self.upload(content, on_progress, name, kind="thumbnail")

    async def _write(
        self,
        client: httpx.AsyncClient,
        content: bytes,
        path: str,
        file_name: str,
        report: ProgressCallback,
    ) -> UploadResult:
        """One full attempt, starting from a fresh branch head."""
        report(0.1)
        lookup = await self.resolve_head(client)

        if isinstance(lookup, EmptyRepository):
            logger.info("Branch %s has no commits (%d), bootstrapping", self._config.branch, lookup.status)
            report(0.5)
            commit_sha = await self.put_contents(client, content, path, f"Upload {file_name}")
            report(1.0)
            return UploadResult(path=path, commit_sha=commit_sha, bootstrap=True)

        if isinstance(lookup, RefFailed):
            raise OtherRemoteError("resolve_head", lookup.status, lookup.body)

        head = lookup.commit_sha
        report(0.2)
        base_tree = await self.get_tree_sha(client, head)
        report(0.3)
        blob_sha = await self.create_blob(client, content)
        report(0.6)
        tree_sha = await self.create_tree(client, base_tree, path, blob_sha)
        report(0.8)
        commit_sha = await self.create_commit(client, f"Upload {file_name}", tree_sha, head)
        report(0.9)
        await self.update_ref(client, commit_sha)
        report(1.0)
        return UploadResult(path=path, commit_sha=commit_sha)

    # --- Protocol steps ---

    async def resolve_head(self, client: httpx.AsyncClient) -> RefLookup:
        branch = self._config.branch
        resp = await self._send(
            client, "resolve_head", "GET", f"{self.repo_url}/git/refs/heads/{branch}"
        )
        if resp.status_code in (404, 409):
            return EmptyRepository(resp.status_code)
        if not resp.is_success:
            return RefFailed(resp.status_code, resp.text)

        data = resp.json()
        # A missing ref that prefixes others comes back as a list of matches.
        if isinstance(data, list):
            exact = f"refs/heads/{branch}"
            data = next((r for r in data if r.get("ref") == exact), None)
            if data is None:
                return EmptyRepository(resp.status_code)
        sha = data["object"]["sha"]
        logger.debug("Head of %s is %s", branch, sha)
        return RefFound(sha)

    async def get_tree_sha(self, client: httpx.AsyncClient, commit_sha: str) -> str:
        data = await self._call(
            client, "get_base_tree", "GET", f"{self.repo_url}/git/commits/{commit_sha}"
        )
        return data["tree"]["sha"]

    async def create_blob(self, client: httpx.AsyncClient, content: bytes) -> str:
        data = await self._call(
            client, "create_blob", "POST", f"{self.repo_url}/git/blobs",
            json={"content": encode_base64(content), "encoding": "base64"},
        )
        return data["sha"]

    async def create_tree(
        self, client: httpx.AsyncClient, base_tree: str, path: str, blob_sha: str
    ) -> str:
        body = {
            "base_tree": base_tree,
            "tree": [
                {"path": path, "mode": REGULAR_FILE_MODE, "type": "blob", "sha": blob_sha},
            ],
        }
        data = await self._call(
            client, "create_tree", "POST", f"{self.repo_url}/git/trees", json=body
        )
        return data["sha"]

    async def create_commit(
        self, client: httpx.AsyncClient, message: str, tree_sha: str, parent_sha: str
    ) -> str:
        body = {"message": message, "tree": tree_sha, "parents": [parent_sha]}
        data = await self._call(
            client, "create_commit", "POST", f"{self.repo_url}/git/commits", json=body
        )
        return data["sha"]

    async def update_ref(self, client: httpx.AsyncClient, commit_sha: str) -> None:
        await self._call(
            client, "update_ref", "PATCH",
            f"{self.repo_url}/git/refs/heads/{self._config.branch}",
            json={"sha": commit_sha, "force": False},
        )

    async def put_contents(
        self, client: httpx.AsyncClient, content: bytes, path: str, message: str
    ) -> str | None:
        """Bootstrap write through the contents API. Returns the commit sha."""
        body = {
            "message": message,
            "content": encode_base64(content),
            "branch": self._config.branch,
        }
        data = await self._call(client, "bootstrap", "PUT", self.contents_url(path), json=body)
        return (data.get("commit") or {}).get("sha")
