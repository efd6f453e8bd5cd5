"""Tests for settings and the sync configuration snapshot."""

import os

import pytest

from mediavault.config import Settings
from mediavault.exceptions import ConfigurationMissing
from mediavault.schemas.sync import SyncConfig


class TestSyncConfig:
    def test_paths_normalized(self):
        cfg = SyncConfig(media_path="/media", thumbnail_path="thumbs")
        assert cfg.media_path == "media/"
        assert cfg.thumbnail_path == "thumbs/"

    def test_api_url_trailing_slash(self):
        assert SyncConfig(api_url="https://ghe.local/api/v3/").api_url == "https://ghe.local/api/v3"

    def test_missing_fields(self):
        assert SyncConfig().missing_fields() == ["token", "owner", "repo"]
        assert SyncConfig(token="t", owner="o").missing_fields() == ["repo"]

    def test_ensure_complete_raises(self):
        with pytest.raises(ConfigurationMissing) as exc_info:
            SyncConfig(owner="o", repo="r").ensure_complete()
        assert exc_info.value.fields == ["token"]
        assert "token" in str(exc_info.value)

    def test_path_for(self):
        cfg = SyncConfig()
        assert cfg.path_for("media", "a.mp3") == "media/a.mp3"
        assert cfg.path_for("thumbnail", "a.jpg") == "thumbnails/a.jpg"


class TestSettings:
    def test_only_used_fields(self):
        assert "environment" not in Settings.model_fields

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("MEDIAVAULT_GITHUB_OWNER", "someone")
        monkeypatch.setenv("MEDIAVAULT_UPLOAD_MAX_ATTEMPTS", "5")
        s = Settings(_env_file=None)
        assert s.github_owner == "someone"
        assert s.sync_config().max_attempts == 5

    def test_paths_absolute(self):
        s = Settings(_env_file=None, database_path="rel/x.db")
        assert os.path.isabs(s.database_path)
        assert os.path.isabs(s.data_dir)

    def test_cors_comma_separated(self):
        s = Settings(_env_file=None, cors_origins="http://a, http://b")
        assert s.cors_origins == ["http://a", "http://b"]

    def test_sync_config_snapshot(self):
        s = Settings(
            _env_file=None,
            github_token="t", github_owner="o", github_repo="r",
            media_path="audio", upload_retry_delay_seconds=0.25,
        )
        cfg = s.sync_config()
        assert cfg.missing_fields() == []
        assert cfg.media_path == "audio/"
        assert cfg.retry_delay == 0.25
