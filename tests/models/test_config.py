"""Tests for StrategyConfig validation and environment loading."""

import dataclasses

import pytest

from twitch_auth.models.config import StrategyConfig


class TestStrategyConfig:
    def test_defaults(self):
        # Act
        config = StrategyConfig(
            client_id="CID", client_secret="CS", callback_url="https://x/cb"
        )

        # Assert
        assert config.scope is None
        assert config.force_verify is False
        assert config.resolved_scope == "user:read:email"

    def test_explicit_scope_wins(self):
        config = StrategyConfig(
            client_id="CID",
            client_secret="CS",
            callback_url="https://x/cb",
            scope="custom",
        )

        assert config.resolved_scope == "custom"

    def test_config_is_immutable(self):
        # Arrange
        config = StrategyConfig(
            client_id="CID", client_secret="CS", callback_url="https://x/cb"
        )

        # Act & Assert
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.scope = "other"

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"client_id": ""}, "client_id"),
            ({"client_secret": ""}, "client_secret"),
            ({"callback_url": ""}, "callback_url"),
        ],
    )
    def test_required_fields(self, overrides, message):
        # Arrange
        kwargs = {
            "client_id": "CID",
            "client_secret": "CS",
            "callback_url": "https://x/cb",
            **overrides,
        }

        # Act & Assert
        with pytest.raises(ValueError, match=message):
            StrategyConfig(**kwargs)

    def test_plain_http_callback_rejected_outside_localhost(self):
        with pytest.raises(ValueError, match="HTTPS or localhost"):
            StrategyConfig(
                client_id="CID",
                client_secret="CS",
                callback_url="http://example.app/callback",
            )

    def test_plain_http_callback_allowed_on_localhost(self):
        config = StrategyConfig(
            client_id="CID",
            client_secret="CS",
            callback_url="http://localhost:8000/auth/twitch",
        )

        assert config.callback_url == "http://localhost:8000/auth/twitch"


class TestFromEnv:
    def test_reads_prefixed_variables(self, monkeypatch):
        # Arrange
        monkeypatch.setenv("TWITCH_CLIENT_ID", "env-client")
        monkeypatch.setenv("TWITCH_CLIENT_SECRET", "env-secret")
        monkeypatch.setenv("TWITCH_CALLBACK_URL", "https://example.app/callback")
        monkeypatch.setenv("TWITCH_SCOPE", "chat:read")
        monkeypatch.setenv("TWITCH_FORCE_VERIFY", "true")

        # Act
        config = StrategyConfig.from_env()

        # Assert
        assert config == StrategyConfig(
            client_id="env-client",
            client_secret="env-secret",
            callback_url="https://example.app/callback",
            scope="chat:read",
            force_verify=True,
        )

    def test_optional_variables_fall_back_to_defaults(self, monkeypatch):
        # Arrange
        monkeypatch.setenv("APP_CLIENT_ID", "env-client")
        monkeypatch.setenv("APP_CLIENT_SECRET", "env-secret")
        monkeypatch.setenv("APP_CALLBACK_URL", "https://example.app/callback")
        monkeypatch.delenv("APP_SCOPE", raising=False)
        monkeypatch.delenv("APP_FORCE_VERIFY", raising=False)

        # Act
        config = StrategyConfig.from_env(prefix="APP_")

        # Assert
        assert config.scope is None
        assert config.force_verify is False

    def test_missing_client_id_raises(self, monkeypatch):
        # Arrange
        monkeypatch.delenv("TWITCH_CLIENT_ID", raising=False)
        monkeypatch.setenv("TWITCH_CLIENT_SECRET", "env-secret")
        monkeypatch.setenv("TWITCH_CALLBACK_URL", "https://example.app/callback")

        # Act & Assert
        with pytest.raises(ValueError, match="client_id"):
            StrategyConfig.from_env()


class TestCallbackURL:
    def test_https_without_host_is_rejected(self):
        with pytest.raises(ValueError, match="HTTPS or localhost"):
            StrategyConfig(
                client_id="CID",
                client_secret="CS",
                callback_url="https:///callback",
            )

    def test_http_on_loopback_ip_is_rejected(self):
        with pytest.raises(ValueError, match="HTTPS or localhost"):
            StrategyConfig(
                client_id="CID",
                client_secret="CS",
                callback_url="http://127.0.0.1:8000/callback",
            )
