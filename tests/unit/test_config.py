"""
Unit tests for ServerConfig.
"""

from pathlib import Path

import pytest

from mediaserver.config import ONE_YEAR, ServerConfig


class TestDefaults:

    def test_media_defaults(self):
        config = ServerConfig()

        assert config.cache_max_age == ONE_YEAR == 31536000
        assert config.chunk_size == 8192
        assert config.dev_host_markers == ("localhost",)
        assert config.dev_path_prefix is None

    def test_media_path_is_resolved(self, media_root: Path):
        config = ServerConfig(media_root=str(media_root / "photos" / ".."))
        assert config.media_path == media_root.resolve()


class TestFromEnv:

    def test_reads_media_variables(self, monkeypatch, media_root: Path):
        monkeypatch.setenv("MEDIA_HOST", "0.0.0.0")
        monkeypatch.setenv("MEDIA_PORT", "9000")
        monkeypatch.setenv("MEDIA_ROOT", str(media_root))
        monkeypatch.setenv("MEDIA_CACHE_MAX_AGE", "3600")
        monkeypatch.setenv("MEDIA_DEV_HOSTS", "localhost, .test")
        monkeypatch.setenv("MEDIA_DEV_PREFIX", "media.example.com")
        monkeypatch.setenv("MEDIA_LOG_FORMAT", "json")

        config = ServerConfig.from_env()

        assert config.host == "0.0.0.0"
        assert config.port == 9000
        assert config.media_root == str(media_root)
        assert config.cache_max_age == 3600
        assert config.dev_host_markers == ("localhost", ".test")
        assert config.dev_path_prefix == "media.example.com"
        assert config.log_format == "json"
        config.validate()

    def test_defaults_without_environment(self, monkeypatch):
        for name in ("MEDIA_PORT", "MEDIA_DEV_PREFIX", "MEDIA_WORKERS"):
            monkeypatch.delenv(name, raising=False)

        config = ServerConfig.from_env()

        assert config.port == 8080
        assert config.dev_path_prefix is None
        assert config.max_workers == 16

    def test_few_workers_lowers_minimum(self, monkeypatch):
        monkeypatch.setenv("MEDIA_WORKERS", "2")

        config = ServerConfig.from_env()

        assert config.max_workers == 2
        assert config.min_workers == 2


class TestValidate:

    def test_valid(self, config: ServerConfig):
        config.validate()

    @pytest.mark.parametrize("overrides", [
        {"port": -1},
        {"port": 70000},
        {"min_workers": 0},
        {"min_workers": 8, "max_workers": 4},
        {"queue_size": 0},
        {"buffer_size": 10},
        {"timeout": 0},
        {"chunk_size": 0},
        {"chunk_size": 65536},
        {"cache_max_age": -1},
        {"log_format": "xml"},
    ])
    def test_invalid(self, config: ServerConfig, overrides: dict):
        for name, value in overrides.items():
            setattr(config, name, value)

        with pytest.raises(ValueError):
            config.validate()

    def test_missing_media_root(self, config: ServerConfig, tmp_path: Path):
        config.media_root = str(tmp_path / "missing")

        with pytest.raises(ValueError):
            config.validate()

    def test_port_zero_allowed(self, config: ServerConfig):
        config.port = 0
        config.validate()
