"""Shared plumbing for the GitHub REST clients."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable
from urllib.parse import quote

import httpx

from mediavault.exceptions import NetworkError, error_for_status
from mediavault.schemas.sync import SyncConfig

logger = logging.getLogger(__name__)

API_VERSION = "2022-11-28"


class GitHubApi:
    """Bearer-authenticated JSON calls against one repository."""

    def __init__(
        self,
        config: SyncConfig,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._config = config
        self._transport = transport
        self._sleep = sleep

    @property
    def config(self) -> SyncConfig:
        return self._config

    @property
    def repo_url(self) -> str:
        return f"/repos/{self._config.owner}/{self._config.repo}"

    def contents_url(self, path: str) -> str:
        return f"{self.repo_url}/contents/{quote(path.strip('/'))}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._config.api_url,
            headers={
                "Authorization": f"Bearer {self._config.token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": API_VERSION,
            },
            timeout=self._config.timeout,
            transport=self._transport,
        )

    async def _send(
        self, client: httpx.AsyncClient, step: str, method: str, url: str, **kwargs: Any
    ) -> httpx.Response:
        """Issue one request; transport failures become NetworkError."""
        try:
            resp = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise NetworkError(step, body=str(e) or type(e).__name__) from e
        logger.debug("%s: %s %s -> %d", step, method, url, resp.status_code)
        return resp

    async def _call(
        self, client: httpx.AsyncClient, step: str, method: str, url: str, **kwargs: Any
    ) -> Any:
        """Issue one request and return its JSON body, or raise by status."""
        resp = await self._send(client, step, method, url, **kwargs)
        if not resp.is_success:
            raise error_for_status(step, resp.status_code, resp.text)
        return resp.json()
