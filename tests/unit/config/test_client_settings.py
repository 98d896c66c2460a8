"""Unit tests for client settings and their loaders."""

import json

import pytest
from pydantic import ValidationError

from connect_client.config import (
    ClientSettings,
    build_settings,
    load_settings_from_env,
    load_settings_from_file,
)
from connect_client.exceptions import ConfigurationError


class TestClientSettings:
    """Test settings validation and normalization."""

    @pytest.mark.parametrize(
        "raw",
        [
            "https://host/api/xml",
            "https://host/api/xml/",
            "https://host/api/xml?",
            "  https://host/api/xml/?  ",
        ],
    )
    def test_service_url_is_normalized(self, raw):
        settings = ClientSettings(service_url=raw)

        assert settings.service_url == "https://host/api/xml"

    def test_defaults(self):
        settings = ClientSettings(service_url="https://host/api/xml")

        assert settings.use_session_param is True
        assert settings.timeout_seconds == 30.0
        assert settings.verify_ssl is True
        assert settings.username is None
        assert settings.proxy_url is None

    @pytest.mark.parametrize("raw", ["", "   ", "/?"])
    def test_empty_service_url_is_rejected(self, raw):
        with pytest.raises(ValidationError, match="can not be empty"):
            ClientSettings(service_url=raw)

    def test_relative_service_url_is_rejected(self):
        with pytest.raises(ValidationError, match="absolute"):
            ClientSettings(service_url="host/api/xml")

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            ClientSettings(service_url="https://host/api/xml", timeout_seconds=0)

    def test_settings_are_immutable(self):
        settings = ClientSettings(service_url="https://host/api/xml")

        with pytest.raises(ValidationError):
            settings.username = "someone"


class TestBuildSettings:
    """Test reporting of invalid values as ConfigurationError."""

    def test_missing_service_url(self):
        with pytest.raises(ConfigurationError, match="can not be null"):
            build_settings({"username": "a"}, "test")

    def test_invalid_values_are_wrapped(self):
        with pytest.raises(ConfigurationError) as exc_info:
            build_settings({"service_url": "ftp://host"}, "test")

        assert "Invalid configuration in test" in str(exc_info.value)
        assert exc_info.value.details


class TestEnvironmentLoader:
    """Test loading settings from CONNECT_* variables."""

    def test_values_are_read(self):
        settings = load_settings_from_env(
            {
                "CONNECT_SERVICE_URL": "https://host/api/xml/",
                "CONNECT_USERNAME": "joy@acme.com",
                "CONNECT_PASSWORD": "football",
                "CONNECT_USE_SESSION_PARAM": "false",
                "CONNECT_TIMEOUT": "5",
            }
        )

        assert settings.service_url == "https://host/api/xml"
        assert settings.username == "joy@acme.com"
        assert settings.password == "football"
        assert settings.use_session_param is False
        assert settings.timeout_seconds == 5.0

    def test_empty_values_are_ignored(self):
        settings = load_settings_from_env(
            {"CONNECT_SERVICE_URL": "https://host/api/xml", "CONNECT_USERNAME": ""}
        )

        assert settings.username is None

    def test_missing_service_url(self):
        with pytest.raises(ConfigurationError):
            load_settings_from_env({})

    def test_invalid_boolean(self):
        with pytest.raises(ConfigurationError, match="Invalid boolean"):
            load_settings_from_env(
                {
                    "CONNECT_SERVICE_URL": "https://host/api/xml",
                    "CONNECT_USE_SESSION_PARAM": "maybe",
                }
            )


class TestFileLoader:
    """Test loading settings from a JSON file."""

    def test_valid_file(self, tmp_path):
        config_path = tmp_path / "connect.json"
        config_path.write_text(
            json.dumps({"service_url": "https://host/api/xml?", "username": "a"})
        )

        settings = load_settings_from_file(config_path)

        assert settings.service_url == "https://host/api/xml"
        assert settings.username == "a"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_settings_from_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        config_path = tmp_path / "connect.json"
        config_path.write_text("{not json")

        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            load_settings_from_file(config_path)

    def test_non_object_json(self, tmp_path):
        config_path = tmp_path / "connect.json"
        config_path.write_text("[1, 2]")

        with pytest.raises(ConfigurationError, match="JSON object"):
            load_settings_from_file(config_path)
