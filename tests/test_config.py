"""Tests for hls_relay.config module."""

import pytest

from hls_relay.config import DEFAULT_USER_AGENT, RelayConfig


class TestRelayConfigFromDict:
    """Tests for RelayConfig.from_dict()."""

    def test_default_values(self):
        """Empty dict should use sensible defaults."""
        config = RelayConfig.from_dict({})

        assert config.port == 3000
        assert config.host == "0.0.0.0"
        assert config.allowed_origins == ["*"]
        assert config.referer_url == ""
        assert config.user_agent == DEFAULT_USER_AGENT
        assert config.fetch_timeout == 10.0
        assert config.cache_ttl == 18000
        assert config.format_sort == ["proto:m3u8"]
        assert config.log_level == "INFO"

    def test_sections(self):
        config = RelayConfig.from_dict({
            "server": {"port": 8080, "allowed_origins": "https://a.example, https://b.example"},
            "upstream": {"referer_url": "https://site.example/", "timeout": 5},
            "cache": {"ttl": 60},
            "resolver": {"format_sort": ["proto:m3u8", "res:720"]},
            "logging": {"level": "DEBUG", "file": "relay.log"},
        })
        assert config.port == 8080
        assert config.allowed_origins == ["https://a.example", "https://b.example"]
        assert config.referer_url == "https://site.example/"
        assert config.fetch_timeout == 5.0
        assert config.cache_ttl == 60
        assert config.format_sort == ["proto:m3u8", "res:720"]
        assert config.log_level == "DEBUG"
        assert config.log_file == "relay.log"

    def test_null_referer_is_empty(self):
        assert RelayConfig.from_dict({"upstream": {"referer_url": None}}).referer_url == ""


class TestRelayConfigValidation:
    @pytest.mark.parametrize("port", [0, 70000])
    def test_bad_port(self, port):
        with pytest.raises(ValueError):
            RelayConfig(port=port)

    @pytest.mark.parametrize("referer", ["site.example", "/page", "ftp://site.example/"])
    def test_bad_referer(self, referer):
        with pytest.raises(ValueError):
            RelayConfig(referer_url=referer)

    def test_bad_ttl_and_timeout(self):
        with pytest.raises(ValueError):
            RelayConfig(cache_ttl=0)
        with pytest.raises(ValueError):
            RelayConfig(fetch_timeout=0)

    def test_watch_url_needs_placeholder(self):
        with pytest.raises(ValueError):
            RelayConfig(watch_url="https://video.example/watch")


    def test_bad_log_level(self):
        with pytest.raises(ValueError):
            RelayConfig(log_level="LOUD")
        with pytest.raises(ValueError):
            RelayConfig(logger_levels={"httpx": "QUIET"})

    def test_default_logger_levels(self):
        assert RelayConfig.from_dict({}).logger_levels == {"httpx": "WARNING", "httpcore": "WARNING"}


class TestRelayConfigEnv:
    def test_env_overrides(self):
        config = RelayConfig().with_env({
            "PORT": "4000",
            "ALLOWED_ORIGINS": "https://a.example,https://b.example",
            "REFERER_URL": "https://site.example/embed",
            "HLS_RELAY_LOG_LEVEL": "WARNING",
        })
        assert config.port == 4000
        assert config.allowed_origins == ["https://a.example", "https://b.example"]
        assert config.referer_url == "https://site.example/embed"
        assert config.log_level == "WARNING"

    def test_empty_env_keeps_values(self):
        base = RelayConfig(port=5000)
        assert base.with_env({}) is base

    def test_empty_referer_env_clears_referer(self):
        config = RelayConfig(referer_url="https://site.example/").with_env({"REFERER_URL": ""})
        assert config.referer_url == ""

    def test_from_env(self):
        assert RelayConfig.from_env({"PORT": "3100"}).port == 3100

    def test_invalid_env_value(self):
        with pytest.raises(ValueError):
            RelayConfig.from_env({"REFERER_URL": "not a url"})


class TestRelayConfigFiles:
    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            RelayConfig.load(str(tmp_path / "missing.yaml"))

    def test_load_empty_file(self, tmp_path):
        path = tmp_path / "relay.yaml"
        path.write_text("", encoding="utf-8")
        assert RelayConfig.load(str(path)) == RelayConfig()

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "relay.yaml"
        original = RelayConfig(port=8123, referer_url="https://site.example/", cache_ttl=120)
        original.save(str(path))
        assert RelayConfig.load(str(path)) == original
