"""Cookie-backed client sessions.

The cookie itself is encoded and signed by Starlette's SessionMiddleware
(itsdangerous). Within one request ``request.session`` is a plain dict that is
serialized once when the response starts, so sequential get/set calls in a
handler always see their own writes.
"""

from starlette.middleware import Middleware
from starlette.middleware.sessions import SessionMiddleware
from starlette.requests import Request

from taskdesk.config import Settings
from taskdesk.models.auth import Session

SESSION_COOKIE = "TASKDESK_SESSION"

_COUNT_KEY = "count"
_OAUTH_STATE_KEY = "oauth_state"


def session_middleware(settings: Settings) -> Middleware:
    return Middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=SESSION_COOKIE,
        max_age=settings.session_max_age,
        same_site="lax",
        https_only=settings.session_https_only,
    )


class SessionManager:
    def get(self, request: Request) -> Session:
        """Return the session carried by the request cookie, or a fresh one."""
        return Session(count=request.session.get(_COUNT_KEY, 0))

    def set(self, request: Request, session: Session) -> None:
        request.session[_COUNT_KEY] = session.count

    def increment(self, request: Request) -> Session:
        session = self.get(request)
        updated = session.model_copy(update={"count": session.count + 1})
        self.set(request, updated)
        return updated

    def remember_oauth_state(self, request: Request, state: str) -> None:
        request.session[_OAUTH_STATE_KEY] = state

    def pop_oauth_state(self, request: Request) -> str | None:
        return request.session.pop(_OAUTH_STATE_KEY, None)
