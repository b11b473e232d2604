"""
Minimal "Log in with Twitch" web app.

You'll need TWITCH_CLIENT_ID, TWITCH_CLIENT_SECRET and TWITCH_CALLBACK_URL
set in the environment or in a .env file. The callback URL must point at
/auth/twitch on this app, e.g. http://localhost:8000/auth/twitch.

Twitch developer console: https://dev.twitch.tv/console/apps
"""

import logging
import secrets
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from dotenv import load_dotenv
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.routing import Route

from twitch_auth.engine import AuthorizationEngine, VerifyParams
from twitch_auth.models.config import StrategyConfig
from twitch_auth.models.errors import OAuth2Error
from twitch_auth.strategy import TwitchStrategy

SESSION_COOKIE = "sid"

logger = logging.getLogger(__name__)


async def verify(params: VerifyParams) -> dict[str, Any]:
    # A real app would look up or create its own user record here.
    profile = params.profile
    return {
        "id": profile.id,
        "login": profile.login,
        "display_name": profile.display_name,
        "email": profile.email,
        "provider": profile.provider,
    }


def create_app(engine: AuthorizationEngine) -> Starlette:
    # In-memory store for a single process demo. Entries are only created
    # when a login flow starts, and nothing is ever evicted.
    sessions: dict[str, dict[str, Any]] = {}

    def find_session(request: Request) -> tuple[str | None, dict[str, Any]]:
        sid = request.cookies.get(SESSION_COOKIE)
        if sid is not None and sid in sessions:
            return sid, sessions[sid]
        return None, {}

    async def homepage(request: Request) -> Response:
        _, session = find_session(request)
        user = session.get("user")
        if user is None:
            return PlainTextResponse("Not logged in. Visit /auth/twitch")
        return JSONResponse(user)

    async def auth_twitch(request: Request) -> Response:
        sid, session = find_session(request)
        try:
            result = await engine.authenticate(request, session)
        except OAuth2Error as e:
            logger.warning(f"Twitch login failed: {e}")
            return PlainTextResponse(f"Login failed: {e}", status_code=401)

        if isinstance(result, Response):
            response = result
        else:
            session["user"] = result
            response = JSONResponse(result)

        if sid is None:
            sid = secrets.token_urlsafe(32)
            sessions[sid] = session
        response.set_cookie(SESSION_COOKIE, sid, httponly=True, samesite="lax")
        return response

    @asynccontextmanager
    async def lifespan(app: Starlette):
        yield
        await engine.close()

    app = Starlette(
        routes=[
            Route("/", homepage),
            Route("/auth/twitch", auth_twitch),
        ],
        lifespan=lifespan,
    )
    app.state.sessions = sessions
    return app


def main() -> None:
    load_dotenv()
    logging.basicConfig(level=logging.INFO)

    config = StrategyConfig.from_env()
    engine = AuthorizationEngine(TwitchStrategy(config), verify)
    uvicorn.run(create_app(engine), host="localhost", port=8000)


if __name__ == "__main__":
    main()
