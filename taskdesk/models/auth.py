from pydantic import BaseModel


class Session(BaseModel):
    count: int = 0


class Principal(BaseModel):
    """Identity returned by a provider. Used once to mark the session, never stored."""

    provider: str
    subject: str | None = None
    access_token: str | None = None
