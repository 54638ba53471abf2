import secrets
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    host: str = "127.0.0.1"
    port: int = 8080
    log_level: str = "INFO"

    # OAuth client credentials come from GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET
    google_client_id: str = ""
    google_client_secret: str = ""
    oauth_authorize_url: str = "https://accounts.google.com/o/oauth2/auth"
    oauth_token_url: str = "https://accounts.google.com/o/oauth2/token"
    oauth_tokeninfo_url: str = "https://oauth2.googleapis.com/tokeninfo"
    oauth_scopes: list[str] = ["https://www.googleapis.com/auth/userinfo.profile"]
    oauth_redirect_url: str = "http://localhost:8080/callback"
    oauth_timeout_seconds: float = 10.0
    auth_provider: Literal["oauth2", "token"] = "oauth2"
    login_landing_path: str = "/hello"

    # Ephemeral secret: sessions reset on restart unless SESSION_SECRET is set
    session_secret: str = Field(default_factory=lambda: secrets.token_urlsafe(32))
    session_max_age: int | None = None
    session_https_only: bool = False

    csrf_allowed_origins: list[str] = ["http://localhost:8080"]
    csrf_protected_prefixes: list[str] = ["/"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
