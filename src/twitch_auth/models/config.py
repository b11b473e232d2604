"""Strategy configuration for the Twitch provider.

Created once when the strategy is registered and shared read-only by every
authentication attempt.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import urlparse

USER_EMAIL_SCOPE = "user:read:email"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class StrategyConfig:
    """Client registration details and authorization preferences.

    Immutable after construction. ``scope`` left as None resolves to the
    ``user:read:email`` scope when the authorization request is built.
    """

    # Required fields first
    client_id: str
    client_secret: str
    callback_url: str

    # Optional fields with defaults last
    scope: str | None = None
    force_verify: bool = False

    def __post_init__(self) -> None:
        """Validate required settings."""
        if not self.client_id:
            raise ValueError("client_id is required")
        if not self.client_secret:
            raise ValueError("client_secret is required")
        if not self.callback_url:
            raise ValueError("callback_url is required")
        if not self._callback_is_secure():
            raise ValueError(
                f"callback_url must use HTTPS or localhost: {self.callback_url}"
            )

    def _callback_is_secure(self) -> bool:
        # Twitch only accepts plain HTTP redirects for localhost.
        parsed = urlparse(self.callback_url)
        if parsed.scheme == "https":
            return bool(parsed.hostname)
        return parsed.scheme == "http" and parsed.hostname == "localhost"

    @property
    def resolved_scope(self) -> str:
        return self.scope if self.scope is not None else USER_EMAIL_SCOPE

    @classmethod
    def from_env(cls, prefix: str = "TWITCH_") -> StrategyConfig:
        """Build a config from environment variables.

        Reads ``<prefix>CLIENT_ID``, ``<prefix>CLIENT_SECRET``,
        ``<prefix>CALLBACK_URL``, ``<prefix>SCOPE`` and
        ``<prefix>FORCE_VERIFY``.

        Raises:
            ValueError: If a required variable is missing or invalid
        """
        force_verify = os.getenv(f"{prefix}FORCE_VERIFY", "")
        return cls(
            client_id=os.getenv(f"{prefix}CLIENT_ID", ""),
            client_secret=os.getenv(f"{prefix}CLIENT_SECRET", ""),
            callback_url=os.getenv(f"{prefix}CALLBACK_URL", ""),
            scope=os.getenv(f"{prefix}SCOPE") or None,
            force_verify=force_verify.strip().lower() in _TRUTHY,
        )
