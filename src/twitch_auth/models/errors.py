"""Exception hierarchy for the Twitch OAuth2 authorization code flow.

Provides specific exception types for each failure mode so the hosting
application can map them to responses without string matching.
"""

from __future__ import annotations


class OAuth2Error(Exception):
    """Base exception for all OAuth2 related errors."""

    pass


class TokenError(OAuth2Error):
    """Raised when token operations fail."""

    pass


class TokenExchangeError(TokenError):
    """Raised when authorization code to token exchange fails."""

    pass


class TokenResponseError(TokenError):
    """Raised when the token endpoint response fails validation."""

    field: str | None = None


class MissingAccessTokenError(TokenResponseError):
    field = "access_token"

    def __init__(self) -> None:
        super().__init__("Missing access token.")


class MissingRefreshTokenError(TokenResponseError):
    field = "refresh_token"

    def __init__(self) -> None:
        super().__init__("Missing refresh token.")


class MissingTokenTypeError(TokenResponseError):
    field = "token_type"

    def __init__(self) -> None:
        super().__init__("Missing token type.")


class MissingExpirationError(TokenResponseError):
    field = "expires_in"

    def __init__(self) -> None:
        super().__init__("Missing expiration.")


class MissingScopeError(TokenResponseError):
    field = "scope"

    def __init__(self) -> None:
        super().__init__("Missing scope.")


class ProfileFetchError(OAuth2Error):
    """Raised when the user profile cannot be retrieved."""

    pass


class ProfileFetchTransportError(ProfileFetchError):
    """Raised when the user-info endpoint cannot be reached or rejects the call.

    Carries the HTTP status code when the endpoint answered at all.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ProfileFetchShapeError(ProfileFetchError):
    """Raised when the user-info response does not contain a user record."""

    pass


class VerificationError(OAuth2Error):
    """Raised by a verification callback to reject an authenticated identity."""

    pass


class AuthorizationError(OAuth2Error):
    """Raised when user authorization fails."""

    pass


class AuthorizationResponseError(OAuth2Error):
    """Raised when authorization response is malformed or invalid."""

    pass


class PKCEError(OAuth2Error):
    """Raised when PKCE parameter generation fails."""

    pass


class AuthorizationCallbackError(OAuth2Error):
    """Raised when callback data is malformed or no flow was started.

    This indicates the request reaching the callback URL does not belong to
    an authorization flow this engine started.
    """

    pass


class StateValidationError(AuthorizationCallbackError):
    """Raised when OAuth state parameter validation fails.

    This indicates either a missing state parameter or a state mismatch,
    which could indicate a CSRF attack or authorization server issue.
    """

    pass
