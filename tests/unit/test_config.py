"""
Unit tests for ServerConfig.
"""

import pytest

from webdemo.config import DEFAULT_PORT, ServerConfig


class TestServerConfig:
    """Tests for ServerConfig defaults and validation."""

    def test_defaults(self):
        """Test the out-of-the-box settings."""
        config = ServerConfig()

        assert config.host == "0.0.0.0"
        assert config.port == DEFAULT_PORT == 8080
        assert config.home_file == "home.html"
        assert config.keep_alive is True
        assert config.log_level == "INFO"
        assert config.server_name == "webdemo/1.0"
        config.validate()

    def test_port_zero_allowed(self):
        ServerConfig(port=0).validate()

    @pytest.mark.parametrize("kwargs", [
        {"port": -1},
        {"port": 65536},
        {"min_workers": 0},
        {"min_workers": 4, "max_workers": 2},
        {"buffer_size": 512},
        {"timeout": 0},
        {"home_file": ""},
    ])
    def test_invalid(self, kwargs):
        """Test that bad values fail fast."""
        with pytest.raises(ValueError):
            ServerConfig(**kwargs).validate()

    def test_no_timeout_allowed(self):
        ServerConfig(timeout=None).validate()
