"""Authorization flow models for the OAuth2 authorization code grant.

Contains models for authorization requests, callback handling and the
per-attempt flow state the engine keeps in the caller's session.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode


@dataclass(frozen=True)
class AuthorizationRequest:
    """Authorization request parameters for the OAuth2 flow.

    ``extra_params`` come from the provider strategy and are appended after
    the protocol parameters; they never replace one of them.
    """

    authorization_endpoint: str
    client_id: str
    redirect_uri: str
    code_challenge: str
    code_challenge_method: str
    state: str
    extra_params: Mapping[str, str] = field(default_factory=dict)

    def build_authorization_url(self) -> str:
        """Build the complete authorization URL."""
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "code_challenge": self.code_challenge,
            "code_challenge_method": self.code_challenge_method,
            "state": self.state,
        }

        for key, value in self.extra_params.items():
            params.setdefault(key, value)

        return f"{self.authorization_endpoint}?{urlencode(params)}"


@dataclass(frozen=True)
class AuthorizationResponse:
    code: str | None = None
    state: str | None = None
    error: str | None = None
    error_description: str | None = None
    error_uri: str | None = None

    def is_error(self) -> bool:
        return self.error is not None


@dataclass(frozen=True)
class FlowState:
    """Secrets for one pending authorization attempt.

    Stored in the caller's session between the redirect and the callback.
    """

    state: str
    code_verifier: str

    def to_dict(self) -> dict[str, str]:
        return {"state": self.state, "code_verifier": self.code_verifier}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FlowState:
        return cls(state=data["state"], code_verifier=data["code_verifier"])
