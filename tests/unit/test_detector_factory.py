"""
Unit tests for detector selection and API key resolution.
"""

import pytest
from unittest.mock import MagicMock

from src.patterndetection.detector import DetectorFactory, NoOpDetector, create_detector
from src.patterndetection.offline import OfflineDetector
from src.patterndetection.online import AnthropicProvider, OnlineDetector
from src.schema.models import FieldType
from src.utils.config import ConfigError, OnlineAPIConfig, PatternDetectionConfig, resolve_api_key


class TestDetectorFactory:
    """Test DetectorFactory mode selection."""

    def test_none_config_is_noop(self):
        detector = create_detector(None)

        assert isinstance(detector, NoOpDetector)
        assert detector.detect_patterns("x", FieldType.NUMERIC, ["1"]) == []

    def test_disabled_flag_wins_over_mode(self):
        config = PatternDetectionConfig(enabled=False, mode="offline")

        assert isinstance(create_detector(config), NoOpDetector)

    def test_disabled_mode(self):
        config = PatternDetectionConfig(enabled=True, mode="disabled")

        assert isinstance(create_detector(config), NoOpDetector)

    def test_offline(self):
        config = PatternDetectionConfig(enabled=True, mode="offline")

        assert isinstance(create_detector(config), OfflineDetector)

    def test_online_with_injected_provider(self):
        provider = MagicMock()
        config = PatternDetectionConfig(enabled=True, mode="online")

        detector = create_detector(config, provider=provider)

        assert isinstance(detector, OnlineDetector)
        assert detector.provider is provider

    def test_online_builds_provider_from_config(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        config = PatternDetectionConfig(
            enabled=True,
            mode="online",
            online_api=OnlineAPIConfig(api_key="sk-test")
        )

        detector = create_detector(config)

        assert isinstance(detector.provider, AnthropicProvider)

    def test_online_without_api_config(self):
        config = PatternDetectionConfig(enabled=True, mode="online")

        with pytest.raises(ConfigError, match="Online API configuration is required"):
            create_detector(config)

    def test_online_without_api_key(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        config = PatternDetectionConfig(enabled=True, mode="online", online_api=OnlineAPIConfig())

        with pytest.raises(ConfigError, match="API key is required"):
            create_detector(config)

    def test_online_unknown_provider(self):
        config = PatternDetectionConfig(
            enabled=True,
            mode="online",
            online_api=OnlineAPIConfig(provider="mystery", api_key="sk-test")
        )

        with pytest.raises(ConfigError, match="Unsupported provider"):
            create_detector(config)

    def test_unknown_mode(self):
        config = PatternDetectionConfig(enabled=True, mode="psychic")

        with pytest.raises(ConfigError, match="Unsupported pattern detection mode"):
            create_detector(config)

    def test_vault_client_passed_through(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        vault_client = MagicMock()
        vault_client.get_api_key.return_value = "sk-vault"
        config = PatternDetectionConfig(
            enabled=True,
            mode="online",
            online_api=OnlineAPIConfig(vault_secret_path="stream-diff/anthropic")
        )

        detector = DetectorFactory(config, vault_client=vault_client).create_detector()

        assert detector.provider.session.headers["x-api-key"] == "sk-vault"


class TestResolveApiKey:
    """Test API key lookup order."""

    def test_literal_key_first(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-env")

        assert resolve_api_key(OnlineAPIConfig(api_key="sk-literal")) == "sk-literal"

    def test_environment_variable(self, monkeypatch):
        monkeypatch.setenv("MY_KEY", "sk-env")

        assert resolve_api_key(OnlineAPIConfig(api_key_env="MY_KEY")) == "sk-env"

    def test_vault_after_environment(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        vault_client = MagicMock()
        vault_client.get_api_key.return_value = "sk-vault"

        key = resolve_api_key(OnlineAPIConfig(vault_secret_path="kv/path"), vault_client=vault_client)

        assert key == "sk-vault"
        vault_client.get_api_key.assert_called_once_with("kv/path")

    def test_nothing_configured(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)

        assert resolve_api_key(OnlineAPIConfig()) == ""
