import logging
from urllib.parse import urlsplit

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware

from taskdesk.config import Settings
from taskdesk.exceptions import CSRFViolation
from taskdesk.models.common import ApiResponse

logger = logging.getLogger(__name__)

CSRF_HEADER = "X-CSRF-Token"
STATE_CHANGING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


class CSRFGuard:
    """Stateless checks applied to state-changing requests on protected paths."""

    def __init__(self, allowed_origins: list[str], protected_prefixes: list[str]):
        self.allowed_origins = {o.rstrip("/").lower() for o in allowed_origins}
        self.protected_prefixes = tuple(protected_prefixes)

    def applies_to(self, method: str, path: str) -> bool:
        return method.upper() in STATE_CHANGING_METHODS and path.startswith(self.protected_prefixes)

    def check(self, headers: Headers) -> None:
        """Raise CSRFViolation unless Origin is allowed, matches Host, and the custom header is set."""
        origin = headers.get("origin")
        if not origin:
            raise CSRFViolation("Missing Origin header")
        if origin.rstrip("/").lower() not in self.allowed_origins:
            raise CSRFViolation(f"Origin not allowed: {origin}")

        host = headers.get("host", "")
        if urlsplit(origin).netloc.lower() != host.lower():
            raise CSRFViolation("Origin does not match Host")

        # Presence alone marks a same-site XHR; simple cross-site forms cannot set it
        if CSRF_HEADER not in headers:
            raise CSRFViolation(f"Missing {CSRF_HEADER} header")


class CSRFMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, guard: CSRFGuard):
        super().__init__(app)
        self.guard = guard

    async def dispatch(self, request: Request, call_next):
        if self.guard.applies_to(request.method, request.url.path):
            try:
                self.guard.check(request.headers)
            except CSRFViolation as e:
                logger.warning("Rejected %s %s: %s", request.method, request.url.path, e)
                return JSONResponse(
                    status_code=403,
                    content=ApiResponse(success=False, message=str(e)).model_dump(),
                )
        return await call_next(request)


def csrf_middleware(settings: Settings) -> Middleware:
    guard = CSRFGuard(settings.csrf_allowed_origins, settings.csrf_protected_prefixes)
    return Middleware(CSRFMiddleware, guard=guard)
