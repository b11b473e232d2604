"""User profile models for the Twitch Helix users endpoint.

``TwitchUserRecord`` and ``UserInfoEnvelope`` describe the wire format;
``TwitchProfile`` is the normalized identity handed to the caller.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class TwitchUserRecord(BaseModel):
    """A single user record from ``GET /helix/users``.

    Every field is optional: a field the provider omits stays None. Values
    are taken as sent, without coercion; only ``created_at`` is parsed from
    its RFC 3339 string.
    """

    model_config = ConfigDict(extra="ignore", strict=True)

    id: str | None = None
    login: str | None = None
    display_name: str | None = None
    type: str | None = None
    broadcaster_type: str | None = None
    description: str | None = None
    profile_image_url: str | None = None
    offline_image_url: str | None = None
    view_count: int | None = None
    email: str | None = None
    created_at: datetime | None = Field(default=None, strict=False)


class UserInfoEnvelope(BaseModel):
    """Helix response envelope wrapping the list of user records."""

    model_config = ConfigDict(extra="ignore")

    data: list[TwitchUserRecord]


class TwitchProfile(BaseModel):
    """Normalized Twitch user identity.

    Produced fresh per authentication and owned by the caller afterwards.
    """

    model_config = ConfigDict(frozen=True)

    id: str | None
    login: str | None
    type: str | None
    broadcaster_type: str | None
    description: str | None
    profile_image_url: str | None
    offline_image_url: str | None
    view_count: int | None
    email: str | None
    created_at: datetime | None
    display_name: str | None
    provider: str
