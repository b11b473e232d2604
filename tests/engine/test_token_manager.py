"""Tests for the authorization code to token exchange.

Covers the form encoded request, successful response passthrough, and
error statuses, network failures and unparseable bodies.
"""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from twitch_auth.models.errors import TokenError, TokenExchangeError
from twitch_auth.models.tokens import TokenRequest
from twitch_auth.services.tokens import OAuth2TokenManager


class TestTokenExchange:
    def setup_method(self):
        # Arrange
        self.token_manager = OAuth2TokenManager()
        self.token_manager._http_client = AsyncMock()
        self.token_request = TokenRequest(
            token_endpoint="https://id.twitch.tv/oauth2/token",
            code="auth-code-123",
            redirect_uri="https://myapp.com/callback",
            client_id="client-456",
            client_secret="secret-789",
            code_verifier="dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk",
        )

    async def test_successful_exchange_returns_raw_body(self):
        # Arrange
        body = {
            "access_token": "access-token-xyz",
            "refresh_token": "refresh-token-abc",
            "expires_in": 14124,
            "scope": ["user:read:email"],
            "token_type": "bearer",
        }
        mock_response = MagicMock()
        mock_response.status_code = 200
        mock_response.json.return_value = body
        self.token_manager._http_client.post.return_value = mock_response

        # Act
        token_data = await self.token_manager.exchange_code_for_token(
            self.token_request
        )

        # Assert
        assert token_data == body

        self.token_manager._http_client.post.assert_awaited_once()
        call_args = self.token_manager._http_client.post.call_args
        assert call_args[0][0] == "https://id.twitch.tv/oauth2/token"

        form_data = call_args[1]["data"]
        assert form_data == {
            "grant_type": "authorization_code",
            "code": "auth-code-123",
            "redirect_uri": "https://myapp.com/callback",
            "client_id": "client-456",
            "client_secret": "secret-789",
            "code_verifier": "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk",
        }

        headers = call_args[1]["headers"]
        assert headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert headers["Accept"] == "application/json"

    async def test_twitch_error_response_raises_with_message(self):
        # Arrange
        mock_response = MagicMock()
        mock_response.status_code = 400
        mock_response.json.return_value = {
            "status": 400,
            "message": "Invalid authorization code",
        }
        self.token_manager._http_client.post.return_value = mock_response

        # Act & Assert
        with pytest.raises(TokenExchangeError) as exc_info:
            await self.token_manager.exchange_code_for_token(self.token_request)

        assert "Invalid authorization code" in str(exc_info.value)
        assert isinstance(exc_info.value, TokenError)

    async def test_rfc_error_response_raises_with_error_code(self):
        # Arrange
        mock_response = MagicMock()
        mock_response.status_code = 400
        mock_response.json.return_value = {
            "error": "invalid_grant",
            "error_description": "Authorization code has expired",
        }
        self.token_manager._http_client.post.return_value = mock_response

        # Act & Assert
        with pytest.raises(TokenExchangeError) as exc_info:
            await self.token_manager.exchange_code_for_token(self.token_request)

        assert "invalid_grant" in str(exc_info.value)
        assert "Authorization code has expired" in str(exc_info.value)

    async def test_network_error_raises_token_exchange_error(self):
        # Arrange
        self.token_manager._http_client.post.side_effect = httpx.ConnectError(
            "Connection failed"
        )

        # Act & Assert
        with pytest.raises(TokenExchangeError, match="HTTP error during token exchange"):
            await self.token_manager.exchange_code_for_token(self.token_request)

    async def test_invalid_json_raises_token_exchange_error(self):
        # Arrange
        mock_response = MagicMock()
        mock_response.status_code = 200
        mock_response.json.side_effect = ValueError("Invalid JSON")
        self.token_manager._http_client.post.return_value = mock_response

        # Act & Assert
        with pytest.raises(TokenExchangeError, match="Invalid token response format"):
            await self.token_manager.exchange_code_for_token(self.token_request)

    async def test_non_object_json_raises_token_exchange_error(self):
        # Arrange
        mock_response = MagicMock()
        mock_response.status_code = 200
        mock_response.json.return_value = ["not", "an", "object"]
        self.token_manager._http_client.post.return_value = mock_response

        # Act & Assert
        with pytest.raises(TokenExchangeError):
            await self.token_manager.exchange_code_for_token(self.token_request)
