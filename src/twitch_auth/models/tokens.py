"""Token exchange models for the Twitch authorization code flow.

Contains the token request parameters sent by the engine and the validated
token response produced by the strategy.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict


@dataclass(frozen=True)
class TokenRequest:
    """Token exchange request parameters (RFC 6749 Section 4.1.3).

    Twitch is a confidential client provider: the client secret travels in
    the form body alongside the PKCE code_verifier (RFC 7636).
    """

    # Required fields first
    token_endpoint: str
    code: str
    redirect_uri: str
    client_id: str
    client_secret: str
    code_verifier: str

    # Optional fields with defaults last
    grant_type: str = "authorization_code"

    def to_form_data(self) -> dict[str, str]:
        """Convert to form data for application/x-www-form-urlencoded request.

        Returns:
            Dictionary suitable for httpx data parameter
        """
        return {
            "grant_type": self.grant_type,
            "code": self.code,
            "redirect_uri": self.redirect_uri,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code_verifier": self.code_verifier,
        }


class TokenResponse(BaseModel):
    """Validated token endpoint response.

    All five fields are mandatory. Values are kept exactly as the provider
    sent them; Twitch reports ``scope`` as a list while other deployments
    send a space separated string, so both are accepted.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    access_token: str
    refresh_token: str
    token_type: str
    expires_in: int  # Seconds until expiry
    scope: str | list[str]

    def extra_params(self) -> dict[str, Any]:
        """Token fields handed to the verification callback as extras."""
        return {
            "token_type": self.token_type,
            "expires_in": self.expires_in,
            "scope": self.scope,
        }
