"""Unit tests for SessionConfig and load_config."""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from rpcwire.config import SessionConfig, load_config
from rpcwire.config.schema import is_loopback_url
from rpcwire.core.constants import DEFAULT_TIMEOUT
from rpcwire.core.errors import ConfigError


class TestSessionConfig:
    """Tests for SessionConfig validation."""

    def test_defaults(self):
        config = SessionConfig(url="http://127.0.0.1:8332")
        assert config.token is None
        assert config.timeout == DEFAULT_TIMEOUT
        assert config.verify_ssl is True
        assert config.extra_headers == {}
        assert config.is_loopback

    def test_https_remote_allowed(self):
        config = SessionConfig(url="https://rpc.example.com/v1")
        assert config.url == "https://rpc.example.com/v1"
        assert not config.is_loopback

    @pytest.mark.parametrize("url", ["http://localhost:8080", "http://[::1]:8332/"])
    def test_http_loopback_allowed(self, url):
        assert SessionConfig(url=url).url == url

    def test_http_remote_rejected(self):
        with pytest.raises(ValidationError, match="must use https"):
            SessionConfig(url="http://rpc.example.com")

    def test_http_remote_allowed_when_opted_in(self):
        config = SessionConfig(url="http://rpc.example.com", allow_insecure_http=True)
        assert config.allow_insecure_http

    @pytest.mark.parametrize("url", ["ftp://host/x", "127.0.0.1:8332", "http://"])
    def test_bad_urls_rejected(self, url):
        with pytest.raises(ValidationError):
            SessionConfig(url=url)

    def test_blank_token_is_none(self):
        assert SessionConfig(url="http://localhost", token="   ").token is None

    def test_token_stripped(self):
        assert SessionConfig(url="http://localhost", token=" abc\n").token == "abc"

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            SessionConfig(url="http://localhost", timeout=0)

    def test_unknown_keys_rejected(self):
        with pytest.raises(ValidationError):
            SessionConfig(url="http://localhost", retries=3)

    def test_reserved_headers_rejected(self):
        with pytest.raises(ValidationError, match="Authorization"):
            SessionConfig(url="http://localhost", extra_headers={"Authorization": "x"})

    def test_frozen(self):
        config = SessionConfig(url="http://localhost")
        with pytest.raises(ValidationError):
            config.url = "http://127.0.0.1"


class TestLoadConfig:
    """Tests for load_config."""

    def test_load_from_path(self, tmp_path: Path):
        path = tmp_path / "rpc.json"
        path.write_text(json.dumps({"url": "https://rpc.example.com", "token": "t"}))

        config = load_config(path)

        assert config.url == "https://rpc.example.com"
        assert config.token == "t"

    def test_missing_explicit_path(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="File not found"):
            load_config(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path: Path):
        path = tmp_path / "rpc.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_config(path)

    def test_validation_failure(self, tmp_path: Path):
        path = tmp_path / "rpc.json"
        path.write_text(json.dumps({"url": "http://rpc.example.com"}))
        with pytest.raises(ConfigError, match="validation failed"):
            load_config(path)

    def test_default_path_under_home(self, isolated_home: Path):
        config_dir = isolated_home / ".rpcwire"
        config_dir.mkdir()
        (config_dir / "config.json").write_text(json.dumps({"url": "http://localhost:1"}))

        assert load_config().url == "http://localhost:1"

    def test_overrides_replace_file_values(self, tmp_path: Path):
        path = tmp_path / "rpc.json"
        path.write_text(json.dumps({"url": "http://localhost:1", "timeout": 5}))

        config = load_config(path, url="http://localhost:2", token=None)

        assert config.url == "http://localhost:2"
        assert config.timeout == 5
        assert config.token is None

    def test_no_file_uses_overrides(self):
        assert load_config(url="http://127.0.0.1:9").url == "http://127.0.0.1:9"

    def test_no_file_no_url(self):
        with pytest.raises(ConfigError):
            load_config()

    def test_utf8_bom_tolerated(self, tmp_path: Path):
        path = tmp_path / "rpc.json"
        path.write_bytes(b'\xef\xbb\xbf{"url": "http://localhost:3"}')

        assert load_config(path).url == "http://localhost:3"

    def test_empty_file_uses_overrides(self, tmp_path: Path):
        path = tmp_path / "rpc.json"
        path.write_text("  \n")

        assert load_config(path, url="http://localhost:4").url == "http://localhost:4"

    def test_non_object_rejected(self, tmp_path: Path):
        path = tmp_path / "rpc.json"
        path.write_text('["http://localhost"]')

        with pytest.raises(ConfigError, match="Expected object.*list"):
            load_config(path)

    def test_invalid_default_file_raises(self, isolated_home: Path):
        config_dir = isolated_home / ".rpcwire"
        config_dir.mkdir()
        (config_dir / "config.json").write_text("{")

        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_config(url="http://localhost:1")

    def test_default_path_directory_ignored(self, isolated_home: Path):
        (isolated_home / ".rpcwire" / "config.json").mkdir(parents=True)

        assert load_config(url="http://localhost:5").url == "http://localhost:5"


class TestIsLoopbackUrl:
    """Tests for is_loopback_url."""

    @pytest.mark.parametrize(
        "url", ["http://127.0.0.1:8332", "http://LOCALHOST/", "https://[::1]:1/x"]
    )
    def test_loopback(self, url):
        assert is_loopback_url(url)

    @pytest.mark.parametrize("url", ["https://rpc.example.com", "http://10.0.0.1", "not a url"])
    def test_remote(self, url):
        assert not is_loopback_url(url)
