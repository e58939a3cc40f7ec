"""Unit tests for configuration loading."""

import json

from config import (
    Config,
    CodecConfig,
    ServerConfig,
    LoggingConfig,
    load_config,
)


class TestCodecConfig:
    """Tests for CodecConfig class."""

    def test_default_values(self):
        """CodecConfig defaults to the wire-compatible layout."""
        config = CodecConfig()
        assert config.epoch == "2000-01-01T00:00:00Z"
        assert config.timestamp_bits == 41

    def test_custom_values(self):
        config = CodecConfig(epoch="2020-01-01T00:00:00Z", timestamp_bits=42)
        assert config.epoch == "2020-01-01T00:00:00Z"
        assert config.timestamp_bits == 42


class TestServerConfig:
    """Tests for ServerConfig class."""

    def test_default_values(self):
        config = ServerConfig()
        assert config.host == "127.0.0.1"
        assert config.port == 8080

    def test_custom_values(self):
        config = ServerConfig(host="0.0.0.0", port=9000)
        assert config.host == "0.0.0.0"
        assert config.port == 9000


class TestLoggingConfig:
    """Tests for LoggingConfig class."""

    def test_default_values(self):
        config = LoggingConfig()
        assert config.level == "INFO"
        assert config.crash_file == "logs/crash.log"


class TestConfig:
    """Tests for main Config class."""

    def test_default_config(self):
        """Config creates default sub-configs."""
        config = Config()
        assert isinstance(config.codec, CodecConfig)
        assert isinstance(config.server, ServerConfig)
        assert isinstance(config.logging, LoggingConfig)

    def test_from_dict(self):
        data = {
            "codec": {"timestamp_bits": 40},
            "server": {"port": 9000},
            "logging": {"level": "DEBUG"},
        }
        config = Config.from_dict(data)
        assert config.codec.timestamp_bits == 40
        assert config.codec.epoch == "2000-01-01T00:00:00Z"
        assert config.server.port == 9000
        assert config.logging.level == "DEBUG"

    def test_from_dict_partial(self):
        config = Config.from_dict({"server": {"port": 5}})
        assert config.server.port == 5
        assert config.codec.timestamp_bits == 41


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_config_reads_bundled_file(self):
        """load_config reads config.json beside the module."""
        config = load_config()
        assert isinstance(config, Config)
        assert config.codec.timestamp_bits == 41
        assert config.codec.epoch == "2000-01-01T00:00:00Z"

    def test_load_config_reads_path(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"codec": {"epoch": "2010-01-01T00:00:00Z"}}))
        config = load_config(path)
        assert config.codec.epoch == "2010-01-01T00:00:00Z"

    def test_load_config_missing_file(self, tmp_path):
        """load_config returns defaults for missing file."""
        config = load_config(tmp_path / "nonexistent.json")
        assert config.server.port == 8080
