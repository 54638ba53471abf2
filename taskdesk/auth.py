"""Login flow: pluggable identity providers behind a single gateway.

Two providers exist:
- "oauth2": authorization-code redirect flow (the default)
- "token": validates a bearer ID token against the provider's tokeninfo endpoint

A completed login increments the session counter; nothing else about the
principal is kept once the callback returns.
"""

import logging
import secrets
from abc import ABC, abstractmethod
from urllib.parse import urlencode

import requests
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.responses import Response

from taskdesk.config import Settings
from taskdesk.exceptions import AuthFailure, ProviderNotConfigured
from taskdesk.http_client import get_session
from taskdesk.models.auth import Principal
from taskdesk.models.common import ApiResponse
from taskdesk.services.sessions import SessionManager

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"


class AuthProvider(ABC):
    """Base class for identity providers."""

    name: str
    # Whether a failed attempt should send the browser back to the login page
    redirects: bool = True

    def __init__(self, settings: Settings, sessions: SessionManager):
        self.settings = settings
        self.sessions = sessions

    def _client_credentials(self) -> tuple[str, str]:
        if not self.settings.google_client_id or not self.settings.google_client_secret:
            raise ProviderNotConfigured(
                "OAuth client is not configured. Set GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET."
            )
        return self.settings.google_client_id, self.settings.google_client_secret

    def challenge(self, request: Request) -> Response | None:
        """Start the login. Return a response to send the client elsewhere, or None to authenticate now."""
        return None

    @abstractmethod
    def authenticate(self, request: Request) -> Principal:
        """
        Resolve the principal for this request.

        Raises:
            AuthFailure: If the provider rejects the attempt or cannot be reached.
        """


class OAuth2RedirectProvider(AuthProvider):
    name = "oauth2"

    def challenge(self, request: Request) -> Response:
        """Redirect to the provider's consent screen, remembering a state nonce in the session."""
        client_id, _ = self._client_credentials()
        state = secrets.token_urlsafe(24)
        self.sessions.remember_oauth_state(request, state)
        params = {
            "client_id": client_id,
            "redirect_uri": self.settings.oauth_redirect_url,
            "response_type": "code",
            "scope": " ".join(self.settings.oauth_scopes),
            "state": state,
            "access_type": "online",
        }
        return RedirectResponse(f"{self.settings.oauth_authorize_url}?{urlencode(params)}", status_code=302)

    def authenticate(self, request: Request) -> Principal:
        """Exchange the callback's authorization code for an access token."""
        expected_state = self.sessions.pop_oauth_state(request)
        query = request.query_params

        error = query.get("error")
        if error:
            raise AuthFailure(f"Provider returned error: {error}")
        code = query.get("code")
        if not code:
            raise AuthFailure("Missing authorization code")
        if not expected_state or not secrets.compare_digest(
            query.get("state", "").encode(), expected_state.encode()
        ):
            raise AuthFailure("OAuth state mismatch")

        client_id, client_secret = self._client_credentials()
        try:
            resp = get_session().post(
                self.settings.oauth_token_url,
                data={
                    "grant_type": "authorization_code",
                    "code": code,
                    "redirect_uri": self.settings.oauth_redirect_url,
                    "client_id": client_id,
                    "client_secret": client_secret,
                },
                headers={"Accept": "application/json"},
                timeout=self.settings.oauth_timeout_seconds,
            )
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise AuthFailure(f"Token exchange failed: {e}") from e

        access_token = data.get("access_token") if isinstance(data, dict) else None
        if not access_token:
            raise AuthFailure("Token response carried no access_token")
        return Principal(provider=self.name, access_token=access_token)


class TokenValidateProvider(AuthProvider):
    name = "token"
    redirects = False

    def authenticate(self, request: Request) -> Principal:
        """Validate the Authorization bearer token and check it was issued to this client."""
        client_id, _ = self._client_credentials()
        scheme, _, token = request.headers.get("authorization", "").partition(" ")
        if scheme.lower() != "bearer" or not token:
            raise AuthFailure("Missing bearer token")

        try:
            resp = get_session().get(
                self.settings.oauth_tokeninfo_url,
                params={"id_token": token},
                timeout=self.settings.oauth_timeout_seconds,
            )
            resp.raise_for_status()
            info = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise AuthFailure(f"Token validation failed: {e}") from e

        if not isinstance(info, dict) or info.get("aud") != client_id:
            raise AuthFailure("Token was issued to a different client")
        subject = info.get("sub")
        if not subject:
            raise AuthFailure("Token carried no subject")
        return Principal(provider=self.name, subject=subject)


PROVIDERS: dict[str, type[AuthProvider]] = {
    OAuth2RedirectProvider.name: OAuth2RedirectProvider,
    TokenValidateProvider.name: TokenValidateProvider,
}


def build_provider(settings: Settings, sessions: SessionManager) -> AuthProvider:
    return PROVIDERS[settings.auth_provider](settings, sessions)


class AuthenticationGateway:
    """Drives one login attempt: Unauthenticated -> Pending -> Authenticated | Failed."""

    def __init__(self, provider: AuthProvider, sessions: SessionManager, landing_path: str = "/hello"):
        self.provider = provider
        self.sessions = sessions
        self.landing_path = landing_path

    def login(self, request: Request) -> Response:
        response = self.provider.challenge(request)
        if response is not None:
            return response
        return self.callback(request)

    def callback(self, request: Request) -> Response:
        try:
            principal = self.provider.authenticate(request)
        except AuthFailure as e:
            logger.warning("Login via %s failed: %s", self.provider.name, e)
            return self._failed()

        session = self.sessions.increment(request)
        logger.info(
            "Login via %s completed (subject=%s), session count=%d",
            principal.provider, principal.subject or "-", session.count,
        )
        return RedirectResponse(self.landing_path, status_code=302)

    def _failed(self) -> Response:
        if self.provider.redirects:
            return RedirectResponse(LOGIN_PATH, status_code=302)
        return JSONResponse(
            status_code=401,
            content=ApiResponse(success=False, message="Authentication failed").model_dump(),
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_auth_gateway(request: Request) -> AuthenticationGateway:
    return request.app.state.auth_gateway


# --- Auth router ---

router = APIRouter(tags=["auth"])


@router.get(LOGIN_PATH)
def login(request: Request, gateway: AuthenticationGateway = Depends(get_auth_gateway)):
    """Send the client to the identity provider."""
    return gateway.login(request)


@router.get("/callback")
def callback(request: Request, gateway: AuthenticationGateway = Depends(get_auth_gateway)):
    """Finish the login started at /login."""
    return gateway.callback(request)
