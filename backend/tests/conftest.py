"""Test fixtures: temp SQLite store, fake GitHub API and FastAPI test client."""

import asyncio
import base64
import itertools
import json

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from mediavault.database import get_db
from mediavault.main import create_app
from mediavault.schemas.sync import SyncConfig
from mediavault.services import init_services, shutdown_services
from mediavault.services.local_store import LocalStore

REPO = "/repos/owner/repo"


class FakeGitHub:
    """In-memory stand-in for the GitHub REST endpoints MediaVault uses.

    Ref updates are only accepted as fast-forwards of the current head, so
    concurrent writers conflict the way they do against the real API.
    """

    def __init__(self, head: str | None = "c0"):
        self.head = head  # None: repository without commits
        self.calls: list[tuple[str, str]] = []
        self.blobs: dict[str, bytes] = {}
        self.trees: list[dict] = []
        self.commits: dict[str, dict] = {}
        self.ref_updates: list[dict] = []
        self.files: dict[str, bytes] = {}
        self.listings: dict[str, list[dict]] = {}
        self.repo_status = 200
        self.ref_rejections: list[tuple[int, str | None]] = []
        self.failures: dict[tuple[str, str], int] = {}
        self._seq = itertools.count(1)

    def reject_next_ref_update(self, status: int = 409, moved_head: str | None = "c1") -> None:
        """Fail the next ref update as if another writer pushed ``moved_head``."""
        self.ref_rejections.append((status, moved_head))

    def fail(self, method: str, suffix: str, status: int) -> None:
        self.failures[(method, suffix)] = status

    def count(self, method: str, suffix: str) -> int:
        return sum(1 for m, p in self.calls if m == method and p.endswith(suffix))

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(0)  # let concurrent uploads interleave
        method, path = request.method, request.url.path
        self.calls.append((method, path))
        body = json.loads(request.content) if request.content else None

        for (m, suffix), status in self.failures.items():
            if m == method and path.endswith(suffix):
                return httpx.Response(status, json={"message": "scripted failure"})

        if path == f"{REPO}/git/refs/heads/main":
            if method == "GET":
                if self.head is None:
                    return httpx.Response(409, json={"message": "Git Repository is empty."})
                return httpx.Response(200, json={
                    "ref": "refs/heads/main",
                    "object": {"sha": self.head, "type": "commit"},
                })
            if method == "PATCH":
                return self._update_ref(body)

        if method == "GET" and path.startswith(f"{REPO}/git/commits/"):
            sha = path.rsplit("/", 1)[1]
            return httpx.Response(200, json={"sha": sha, "tree": {"sha": f"tree-of-{sha}"}})

        if method == "POST" and path == f"{REPO}/git/blobs":
            sha = f"blob-{next(self._seq)}"
            self.blobs[sha] = base64.b64decode(body["content"])
            return httpx.Response(201, json={"sha": sha})

        if method == "POST" and path == f"{REPO}/git/trees":
            sha = f"tree-{next(self._seq)}"
            self.trees.append({**body, "sha": sha})
            return httpx.Response(201, json={"sha": sha})

        if method == "POST" and path == f"{REPO}/git/commits":
            sha = f"commit-{next(self._seq)}"
            self.commits[sha] = body
            return httpx.Response(201, json={"sha": sha})

        if path.startswith(f"{REPO}/contents/"):
            file_path = path[len(f"{REPO}/contents/"):]
            if method == "PUT":
                self.files[file_path] = base64.b64decode(body["content"])
                self.head = "bootstrap-commit"
                return httpx.Response(201, json={
                    "content": {"path": file_path},
                    "commit": {"sha": "bootstrap-commit"},
                })
            if method == "GET":
                if file_path in self.listings:
                    return httpx.Response(200, json=self.listings[file_path])
                if file_path in self.files:
                    return httpx.Response(200, json={
                        "path": file_path,
                        "download_url": f"https://download.example/{file_path}",
                    })
                return httpx.Response(404, json={"message": "Not Found"})

        if method == "GET" and path == REPO:
            return httpx.Response(self.repo_status, json={"full_name": "owner/repo"})

        return httpx.Response(404, json={"message": "Not Found"})

    def _update_ref(self, body: dict) -> httpx.Response:
        self.ref_updates.append(body)
        if self.ref_rejections:
            status, moved_head = self.ref_rejections.pop(0)
            if moved_head:
                self.head = moved_head
            return httpx.Response(status, json={"message": "Update is not a fast forward"})
        parents = self.commits.get(body["sha"], {}).get("parents", [])
        if parents != [self.head]:
            return httpx.Response(422, json={"message": "Update is not a fast forward"})
        self.head = body["sha"]
        return httpx.Response(200, json={"object": {"sha": body["sha"]}})

    def chain(self) -> list[str]:
        """Commit shas reachable from head, newest first."""
        shas = []
        sha = self.head
        while sha in self.commits:
            shas.append(sha)
            sha = self.commits[sha]["parents"][0]
        return shas


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def sync_config():
    return SyncConfig(
        token="ghp_test",
        owner="owner",
        repo="repo",
        branch="main",
        media_path="media",
        thumbnail_path="thumbnails/",
        retry_delay=1.0,
    )


@pytest.fixture
def fake_github():
    return FakeGitHub()


@pytest.fixture
def sleeper():
    return RecordingSleep()


@pytest_asyncio.fixture
async def store(tmp_path):
    """A LocalStore on a temp SQLite file."""
    s = LocalStore(str(tmp_path / "mediavault.db"))
    await s.open()
    yield s
    await s.close()


@pytest_asyncio.fixture
async def db_session(store: LocalStore):
    """An async session on the test store's database."""
    session_factory = await store.session_factory()
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(store: LocalStore, db_session):
    """Async test client with services bound to the test store."""
    await init_services(local_store=store)
    app = create_app()

    async def _override_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    await shutdown_services()
