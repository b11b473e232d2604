"""PKCE (Proof Key for Code Exchange) for the authorization code flow.

Twitch accepts the S256 method only, so that is the single method generated
here. The verifier travels to the token endpoint; the challenge goes into
the authorization redirect.
"""

from __future__ import annotations

import base64
import hashlib
import secrets
import string
from dataclasses import dataclass

from twitch_auth.models.errors import PKCEError

_VERIFIER_ALPHABET = string.ascii_letters + string.digits + "-._~"
_VERIFIER_LENGTH = 128


@dataclass(frozen=True)
class PKCEParameters:
    """Verifier and S256 challenge for one authorization attempt."""

    code_verifier: str
    code_challenge: str
    code_challenge_method: str = "S256"

    def __post_init__(self) -> None:
        # RFC 7636 Section 4.1 and 4.2
        if not (43 <= len(self.code_verifier) <= 128):
            raise ValueError("code_verifier must be 43-128 characters")
        if not (43 <= len(self.code_challenge) <= 128):
            raise ValueError("code_challenge must be 43-128 characters")
        if self.code_challenge_method != "S256":
            raise ValueError("Only S256 code challenge method is supported")


def s256_challenge(code_verifier: str) -> str:
    """BASE64URL-ENCODE(SHA256(ASCII(code_verifier))), unpadded."""
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


class PKCEManager:
    """Generates fresh PKCE parameters for each redirect."""

    def generate_parameters(self) -> PKCEParameters:
        """Generate new PKCE parameters for an authorization flow.

        Raises:
            PKCEError: If parameter generation fails
        """
        code_verifier = "".join(
            secrets.choice(_VERIFIER_ALPHABET) for _ in range(_VERIFIER_LENGTH)
        )

        try:
            return PKCEParameters(
                code_verifier=code_verifier,
                code_challenge=s256_challenge(code_verifier),
            )
        except ValueError as e:
            raise PKCEError(f"Failed to generate PKCE parameters: {e}") from e
