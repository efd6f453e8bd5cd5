"""Tests for the reconciled library view."""

from unittest.mock import patch

import pytest
from httpx import AsyncClient

from mediavault.services.remote_library import RemoteLibraryClient


def _remote_item(name, sha, prefix="media"):
    return {"name": name, "path": f"{prefix}/{name}", "sha": sha, "size": 9, "type": "file"}


async def _save(store, name, file_type="audio", created=100):
    return await store.save_file(b"x", {
        "name": name,
        "type": file_type,
        "mime_type": "image/jpeg" if file_type == "thumbnail" else "audio/mpeg",
        "size": 1,
        "created": created,
    })


@pytest.fixture
def remote_library(sync_config, fake_github, sleeper):
    client = RemoteLibraryClient(sync_config, transport=fake_github.transport(), sleep=sleeper)
    with patch("mediavault.api.routes.library.get_library_client", return_value=client):
        yield client


@pytest.mark.asyncio
async def test_local_only_when_unconfigured(client: AsyncClient, store):
    await _save(store, "song.mp3")
    await _save(store, "song.jpg", "thumbnail")

    resp = await client.get("/api/library")
    assert resp.status_code == 200
    data = resp.json()
    assert data["remote_error"] is None
    assert [f["name"] for f in data["files"]] == ["song.mp3"]
    assert data["files"][0]["is_local"] is True


@pytest.mark.asyncio
async def test_no_handles_left_after_caller_revokes(client: AsyncClient, store):
    await _save(store, "song.mp3")
    await _save(store, "song.jpg", "thumbnail")

    files = (await client.get("/api/library")).json()["files"]
    for item in files:
        token = item["url"].split(":", 1)[1]
        assert (await client.delete(f"/api/blobs/{token}")).status_code == 204

    assert store._handles == {}


@pytest.mark.asyncio
async def test_merges_remote(client: AsyncClient, store, fake_github, remote_library):
    local_id = await _save(store, "Music_Song_Me_2024-06-15.mp3")
    fake_github.listings["media"] = [
        _remote_item("Music_Song_Me_2024-06-15.mp3", "dup"),
        _remote_item("Music_Older_Me_2024-03-10.mp3", "old"),
    ]

    data = (await client.get("/api/library")).json()

    assert data["remote_error"] is None
    assert [(f["id"], f["is_local"]) for f in data["files"]] == [
        (local_id, True),
        ("remote-old", False),
    ]
    assert data["files"][1]["uploaded"] is True
    assert data["files"][1]["path"] == "media/Music_Older_Me_2024-03-10.mp3"


@pytest.mark.asyncio
async def test_remote_failure_degrades(client: AsyncClient, store, fake_github, remote_library):
    await _save(store, "song.mp3")
    fake_github.repo_status = 401

    resp = await client.get("/api/library")

    assert resp.status_code == 200
    data = resp.json()
    assert "Invalid GitHub token" in data["remote_error"]
    assert [f["name"] for f in data["files"]] == ["song.mp3"]


@pytest.mark.asyncio
async def test_thumbnails_local_wins(client: AsyncClient, store, fake_github, remote_library):
    await _save(store, "song.mp3")
    await _save(store, "song.jpg", "thumbnail")
    fake_github.listings["thumbnails"] = [
        _remote_item("song.jpg", "t1", prefix="thumbnails"),
        _remote_item("remote-only.png", "t2", prefix="thumbnails"),
    ]

    data = (await client.get("/api/library/thumbnails")).json()

    assert data["song"]["is_local"] is True
    assert data["song"]["url"].startswith("blob:")
    assert data["remote-only"] == {"url": "thumbnails/remote-only.png", "is_local": False}


@pytest.mark.asyncio
async def test_download_url(client: AsyncClient, fake_github, remote_library):
    fake_github.files["media/song.mp3"] = b"x"
    resp = await client.get("/api/library/download-url", params={"path": "media/song.mp3"})
    assert resp.status_code == 200
    assert resp.json()["url"] == "https://download.example/media/song.mp3"


@pytest.mark.asyncio
async def test_download_url_unconfigured(client: AsyncClient):
    resp = await client.get("/api/library/download-url", params={"path": "media/song.mp3"})
    assert resp.status_code == 400
