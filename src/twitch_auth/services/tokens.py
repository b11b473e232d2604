"""OAuth2 token exchange service.

Implements the RFC 6749 token endpoint interaction with PKCE (RFC 7636).
Returns the raw response body; validating it is the provider strategy's job.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from twitch_auth.models.errors import TokenExchangeError
from twitch_auth.models.tokens import TokenRequest

logger = logging.getLogger(__name__)


class OAuth2TokenManager:
    """Performs the authorization code to access token exchange.

    Uses application/x-www-form-urlencoded encoding as required by RFC 6749.
    """

    def __init__(self, timeout: float = 30.0):
        """Initialize OAuth token manager.

        Args:
            timeout: HTTP request timeout in seconds
        """
        self.timeout = timeout
        self._http_client = httpx.AsyncClient(timeout=timeout)

    async def exchange_code_for_token(
        self, token_request: TokenRequest
    ) -> dict[str, Any]:
        """Exchange authorization code for access token.

        Implements RFC 6749 Section 4.1.3 - Access Token Request.

        Args:
            token_request: Token exchange request parameters

        Returns:
            Decoded JSON body of a successful token response

        Raises:
            TokenExchangeError: On network failure, a non-200 status or a
                body that is not a JSON object
        """
        logger.debug(f"Exchanging authorization code at {token_request.token_endpoint}")

        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
        }

        form_data = token_request.to_form_data()

        # Log request details (without sensitive data)
        logger.debug(
            f"Token request: grant_type={form_data['grant_type']}, "
            f"client_id={form_data['client_id']}"
        )

        try:
            response = await self._http_client.post(
                token_request.token_endpoint,
                data=form_data,
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise TokenExchangeError(f"HTTP error during token exchange: {e}") from e

        return self._parse_token_response(response)

    def _parse_token_response(self, response: httpx.Response) -> dict[str, Any]:
        """Decode the token endpoint response.

        Error responses follow RFC 6749 Section 5.2; Twitch also reports a
        ``message`` field instead of ``error_description``.
        """
        try:
            response_data = response.json()
        except ValueError as e:
            raise TokenExchangeError(
                f"Invalid token response format (status {response.status_code}): {e}"
            ) from e

        if not isinstance(response_data, dict):
            raise TokenExchangeError("Token response is not a JSON object")

        if response.status_code != 200:
            error_code = response_data.get("error", "unknown_error")
            error_description = response_data.get(
                "error_description",
                response_data.get("message", "No description provided"),
            )

            logger.warning(
                f"Token exchange failed with {response.status_code}: "
                f"{error_code} - {error_description}"
            )
            raise TokenExchangeError(
                f"Token exchange failed: {error_code} - {error_description}"
            )

        logger.info("Token exchange successful")
        return response_data

    async def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        await self._http_client.aclose()
