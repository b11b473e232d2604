"""Generic OAuth2 authorization code engine.

Coordinates the redirect, callback, token exchange, profile fetch and
verification steps. Provider specifics live behind the ``ProviderStrategy``
capability interface; the engine holds a strategy instead of being
subclassed by one.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, MutableMapping
from dataclasses import dataclass, field
from typing import Any, Generic, Protocol, TypeVar

from starlette.requests import Request
from starlette.responses import RedirectResponse

from twitch_auth.models.config import StrategyConfig
from twitch_auth.models.errors import AuthorizationCallbackError
from twitch_auth.models.flow import FlowState
from twitch_auth.models.tokens import TokenRequest, TokenResponse
from twitch_auth.services.flow import OAuth2FlowManager
from twitch_auth.services.tokens import OAuth2TokenManager

logger = logging.getLogger(__name__)

ProfileT = TypeVar("ProfileT")
UserT = TypeVar("UserT")


class ProviderStrategy(Protocol):
    """Capability interface a provider plugs into the engine.

    The engine calls these hooks at the redirect, code exchange and profile
    fetch steps of the flow.
    """

    name: str
    authorization_endpoint: str
    token_endpoint: str
    config: StrategyConfig

    def authorization_params(self) -> dict[str, str]:
        """Extra query parameters for the authorization redirect."""
        ...

    def parse_token_response(self, data: Any) -> TokenResponse:
        """Validate the decoded token endpoint body."""
        ...

    async def fetch_profile(self, access_token: str) -> Any:
        """Fetch the authenticated user's profile."""
        ...

    async def close(self) -> None: ...


@dataclass(frozen=True)
class VerifyParams(Generic[ProfileT]):
    """Everything the verification callback gets to decide on an identity."""

    access_token: str
    refresh_token: str
    profile: ProfileT
    extra_params: dict[str, Any] = field(default_factory=dict)


VerifyCallback = Callable[[VerifyParams[Any]], Awaitable[UserT]]


class AuthorizationEngine(Generic[UserT]):
    """Runs the OAuth2 authorization code flow for one provider strategy.

    Per-attempt secrets (state and PKCE verifier) live in the caller's
    session mapping, so one engine instance serves concurrent requests.
    """

    def __init__(
        self,
        strategy: ProviderStrategy,
        verify: VerifyCallback[UserT],
        timeout: float = 30.0,
    ):
        """Initialize the engine.

        Args:
            strategy: Provider hooks and configuration
            verify: Async callback turning a verified identity into a user.
                Whatever it raises propagates unchanged.
            timeout: HTTP request timeout for the token exchange
        """
        self.strategy = strategy
        self.verify = verify

        self.flow_manager = OAuth2FlowManager()
        self.token_manager = OAuth2TokenManager(timeout=timeout)

    @property
    def session_key(self) -> str:
        return f"oauth2:{self.strategy.name}"

    def authorization_url(self, session: MutableMapping[str, Any]) -> str:
        """Start a flow and return the provider authorization URL.

        Stores the state and PKCE verifier in ``session`` for the callback.
        """
        config = self.strategy.config
        url, flow_state = self.flow_manager.start_authorization_flow(
            self.strategy.authorization_endpoint,
            config.client_id,
            config.callback_url,
            self.strategy.authorization_params(),
        )
        session[self.session_key] = flow_state.to_dict()
        return url

    def redirect(self, session: MutableMapping[str, Any]) -> RedirectResponse:
        """Start a flow and return a 302 redirect to the provider."""
        return RedirectResponse(self.authorization_url(session), status_code=302)

    async def handle_callback(
        self, callback_url: str, session: MutableMapping[str, Any]
    ) -> UserT:
        """Complete the flow from the provider callback URL.

        Args:
            callback_url: Full URL the provider redirected back to
            session: Session mapping used when the flow was started

        Returns:
            The value returned by the verification callback

        Raises:
            AuthorizationCallbackError: No flow was started in this session
            OAuth2Error: Any callback, token or profile failure
        """
        stored = session.pop(self.session_key, None)
        if stored is None:
            raise AuthorizationCallbackError(
                f"No pending {self.strategy.name} authorization in session"
            )
        flow_state = FlowState.from_dict(stored)

        # 1. Validate callback
        code = self.flow_manager.handle_authorization_callback(
            callback_url, flow_state.state
        )

        # 2. Exchange code for tokens
        config = self.strategy.config
        token_request = TokenRequest(
            token_endpoint=self.strategy.token_endpoint,
            code=code,
            redirect_uri=config.callback_url,
            client_id=config.client_id,
            client_secret=config.client_secret,
            code_verifier=flow_state.code_verifier,
        )
        token_data = await self.token_manager.exchange_code_for_token(token_request)

        # 3. Validate token response
        tokens = self.strategy.parse_token_response(token_data)

        # 4. Fetch profile
        logger.debug(f"Fetching {self.strategy.name} profile")
        profile = await self.strategy.fetch_profile(tokens.access_token)

        # 5. Verify
        user = await self.verify(
            VerifyParams(
                access_token=tokens.access_token,
                refresh_token=tokens.refresh_token,
                profile=profile,
                extra_params=tokens.extra_params(),
            )
        )

        logger.info(f"Authenticated with {self.strategy.name}")
        return user

    async def authenticate(
        self, request: Request, session: MutableMapping[str, Any]
    ) -> UserT | RedirectResponse:
        """Single entry point for the login route.

        Without ``code`` or ``error`` in the query string this starts a new
        flow and returns the redirect; otherwise it completes the flow.
        """
        query = request.query_params
        if "code" not in query and "error" not in query:
            logger.debug(f"Redirecting to {self.strategy.name} authorization")
            return self.redirect(session)

        return await self.handle_callback(str(request.url), session)

    async def close(self) -> None:
        """Close all service connections."""
        await self.token_manager.close()
        await self.strategy.close()
