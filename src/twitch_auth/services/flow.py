"""OAuth2 authorization flow orchestration service.

Builds the authorization redirect with PKCE and state, and parses and
validates the callback the provider sends back.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Mapping
from urllib.parse import parse_qs, urlparse

from twitch_auth.models.errors import (
    AuthorizationCallbackError,
    AuthorizationError,
    AuthorizationResponseError,
    StateValidationError,
)
from twitch_auth.models.flow import (
    AuthorizationRequest,
    AuthorizationResponse,
    FlowState,
)
from twitch_auth.primitives.pkce import PKCEManager

logger = logging.getLogger(__name__)

# 24 random bytes encode to a 32 character URL-safe state value.
STATE_BYTES = 24


class OAuth2FlowManager:
    """Orchestrates the redirect and callback legs of the authorization flow.

    The state value and PKCE verifier it generates are returned as a
    ``FlowState`` for the engine to keep in the session; this class keeps
    nothing between calls.
    """

    def __init__(self):
        self._pkce_manager = PKCEManager()

    def start_authorization_flow(
        self,
        authorization_endpoint: str,
        client_id: str,
        redirect_uri: str,
        extra_params: Mapping[str, str] | None = None,
    ) -> tuple[str, FlowState]:
        """Start an authorization flow.

        Args:
            authorization_endpoint: Provider authorization URL
            client_id: Registered client identifier
            redirect_uri: URI to redirect to after authorization
            extra_params: Provider specific query parameters

        Returns:
            Tuple of (authorization_url, flow_state). Store the flow state
            for the callback leg.
        """
        pkce_params = self._pkce_manager.generate_parameters()
        state = secrets.token_urlsafe(STATE_BYTES)

        auth_request = AuthorizationRequest(
            authorization_endpoint=authorization_endpoint,
            client_id=client_id,
            redirect_uri=redirect_uri,
            code_challenge=pkce_params.code_challenge,
            code_challenge_method=pkce_params.code_challenge_method,
            state=state,
            extra_params=dict(extra_params or {}),
        )

        authorization_url = auth_request.build_authorization_url()
        logger.info(f"Generated authorization URL for client {client_id}")

        return authorization_url, FlowState(
            state=state, code_verifier=pkce_params.code_verifier
        )

    def handle_authorization_callback(
        self,
        callback_url: str,
        expected_state: str,
    ) -> str:
        """Validate the provider callback and return the authorization code.

        State is checked before anything else, including a provider error,
        so a forged callback never reaches the error branch.

        Args:
            callback_url: Full callback URL received from the provider
            expected_state: State parameter sent in the authorization request

        Returns:
            The authorization code

        Raises:
            AuthorizationCallbackError: If the callback URL is malformed
            StateValidationError: If the state parameter is missing or differs
            AuthorizationError: If the provider reported an error
            AuthorizationResponseError: If the callback carries no code
        """
        logger.debug("Processing authorization callback")

        auth_response = self._parse_callback_url(callback_url)

        if auth_response.state is None:
            raise StateValidationError(
                "Authorization server callback missing required state parameter"
            )
        if not secrets.compare_digest(expected_state, auth_response.state):
            raise StateValidationError(
                "State parameter mismatch - possible CSRF attack"
            )

        if auth_response.is_error():
            logger.warning(
                f"Authorization callback contained error: {auth_response.error} - "
                f"{auth_response.error_description}"
            )
            message = (
                f"Authorization failed: {auth_response.error} "
                f"({auth_response.error_description or ''})"
            )
            if auth_response.error_uri:
                message += f" See: {auth_response.error_uri}"
            raise AuthorizationError(message)

        if auth_response.code is None:
            raise AuthorizationResponseError("Missing authorization code")

        logger.info("Authorization callback successful - received authorization code")
        return auth_response.code

    def _parse_callback_url(self, callback_url: str) -> AuthorizationResponse:
        """Parse OAuth callback URL into AuthorizationResponse.

        Raises:
            AuthorizationCallbackError: If URL is malformed
        """
        try:
            parsed = urlparse(callback_url)
            query_params = parse_qs(parsed.query)
        except ValueError as e:
            raise AuthorizationCallbackError(
                f"Failed to parse callback URL: {e}"
            ) from e

        def get_single_param(key: str) -> str | None:
            values = query_params.get(key, [])
            return values[0] if values else None

        return AuthorizationResponse(
            code=get_single_param("code"),
            state=get_single_param("state"),
            error=get_single_param("error"),
            error_description=get_single_param("error_description"),
            error_uri=get_single_param("error_uri"),
        )
