"""Twitch provider strategy for the OAuth2 authorization code flow.

Supplies the Twitch specific pieces the generic engine plugs in:
- Endpoint URLs for authorization, token exchange and user info
- Extra authorization query parameters (scope, force_verify)
- Token response validation
- Profile fetch and normalization from the Helix users endpoint
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx
from pydantic import ValidationError

from twitch_auth.models.config import StrategyConfig
from twitch_auth.models.errors import (
    MissingAccessTokenError,
    MissingExpirationError,
    MissingRefreshTokenError,
    MissingScopeError,
    MissingTokenTypeError,
    ProfileFetchShapeError,
    ProfileFetchTransportError,
    TokenResponseError,
)
from twitch_auth.models.profile import (
    TwitchProfile,
    TwitchUserRecord,
    UserInfoEnvelope,
)
from twitch_auth.models.tokens import TokenResponse

logger = logging.getLogger(__name__)

AUTHORIZATION_URL = "https://id.twitch.tv/oauth2/authorize"
TOKEN_URL = "https://id.twitch.tv/oauth2/token"
USER_INFO_URL = "https://api.twitch.tv/helix/users"

# Checked in order; the first missing field wins.
_REQUIRED_TOKEN_FIELDS: tuple[tuple[str, type[TokenResponseError]], ...] = (
    ("access_token", MissingAccessTokenError),
    ("refresh_token", MissingRefreshTokenError),
    ("token_type", MissingTokenTypeError),
    ("expires_in", MissingExpirationError),
    ("scope", MissingScopeError),
)


def _is_absent(value: Any) -> bool:
    """Missing, null, empty string, zero or false.

    Empty lists count as present: Twitch sends ``"scope": []`` for a grant
    without scopes.
    """
    if value is None or value is False or value == "":
        return True
    return isinstance(value, (int, float)) and value == 0


def normalize_profile(record: TwitchUserRecord) -> TwitchProfile:
    """Map a Helix user record onto a TwitchProfile.

    Pure field-by-field copy. ``provider`` is always the strategy name and
    never read from the record.
    """
    return TwitchProfile(
        id=record.id,
        login=record.login,
        type=record.type,
        broadcaster_type=record.broadcaster_type,
        description=record.description,
        profile_image_url=record.profile_image_url,
        offline_image_url=record.offline_image_url,
        view_count=record.view_count,
        email=record.email,
        created_at=record.created_at,
        display_name=record.display_name,
        provider=TwitchStrategy.name,
    )


class TwitchStrategy:
    """Provider strategy for Twitch.

    Implements the engine's ``ProviderStrategy`` capability interface. Holds
    no per-request state; the config is read-only and a single instance can
    serve concurrent authentication attempts.
    """

    name = "twitch"

    authorization_endpoint = AUTHORIZATION_URL
    token_endpoint = TOKEN_URL
    user_info_endpoint = USER_INFO_URL

    def __init__(self, config: StrategyConfig, timeout: float = 30.0):
        """Initialize the Twitch strategy.

        Args:
            config: Client credentials and authorization preferences
            timeout: HTTP request timeout in seconds for the profile fetch
        """
        self.config = config
        self.timeout = timeout
        self._http_client = httpx.AsyncClient(timeout=timeout)

    def authorization_params(self) -> dict[str, str]:
        """Query parameters added to the authorization redirect.

        Returns:
            ``scope`` (configured or ``user:read:email``) followed by
            ``force_verify`` rendered as ``"true"`` or ``"false"``.
        """
        return {
            "scope": self.config.resolved_scope,
            "force_verify": "true" if self.config.force_verify else "false",
        }

    def parse_token_response(self, data: Any) -> TokenResponse:
        """Validate a token endpoint response body.

        Presence is checked field by field and fails fast. Null, empty
        strings and zero count as missing, so ``expires_in: 0`` raises
        MissingExpirationError; an empty scope list does not.

        Args:
            data: Decoded JSON body of the token endpoint response

        Returns:
            TokenResponse: Field values copied unchanged

        Raises:
            TokenResponseError: A ``Missing*Error`` subclass naming the first
                absent field, or the base class for a malformed body
        """
        if not isinstance(data, Mapping):
            raise TokenResponseError(
                f"Token response must be a JSON object, got {type(data).__name__}"
            )

        for field_name, error_class in _REQUIRED_TOKEN_FIELDS:
            if _is_absent(data.get(field_name)):
                raise error_class()

        try:
            return TokenResponse(
                access_token=data["access_token"],
                refresh_token=data["refresh_token"],
                token_type=data["token_type"],
                expires_in=data["expires_in"],
                scope=data["scope"],
            )
        except ValidationError as e:
            raise TokenResponseError(f"Invalid token response format: {e}") from e

    async def fetch_profile(self, access_token: str) -> TwitchProfile:
        """Fetch and normalize the authenticated user's profile.

        Args:
            access_token: Access token returned by the token exchange

        Returns:
            TwitchProfile for the first user record in the response

        Raises:
            ProfileFetchTransportError: Network failure or non-2xx status
            ProfileFetchShapeError: Body is not a users envelope with at
                least one record
        """
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Client-Id": self.config.client_id,
        }

        logger.debug(f"Fetching user profile from {self.user_info_endpoint}")

        try:
            response = await self._http_client.get(
                self.user_info_endpoint, headers=headers
            )
        except httpx.HTTPError as e:
            raise ProfileFetchTransportError(
                f"HTTP error during profile fetch: {e}"
            ) from e

        if not 200 <= response.status_code < 300:
            raise ProfileFetchTransportError(
                f"Profile fetch failed with status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            envelope = UserInfoEnvelope.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ProfileFetchShapeError(f"Invalid user info response: {e}") from e

        if not envelope.data:
            raise ProfileFetchShapeError("User info response contains no user records")

        profile = normalize_profile(envelope.data[0])
        logger.info(f"Fetched Twitch profile for user {profile.id}")
        return profile

    async def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        await self._http_client.aclose()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name}>"
