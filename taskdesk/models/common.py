from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope wrapping every JSON response, success and failure alike."""

    success: bool
    data: T | None = None
    message: str | None = None


class HealthStatus(BaseModel):
    status: str
    timestamp: int  # epoch milliseconds


class ApiInfo(BaseModel):
    name: str
    version: str
    description: str
    endpoints: dict[str, str]
