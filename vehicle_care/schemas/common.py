from typing import Generic, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class APIError(BaseModel):
    code: str
    message: str


class APIResponse(BaseModel, Generic[T]):
    """Envelope returned by every JSON endpoint."""

    success: bool
    data: T | None = None
    count: int | None = None
    message: str | None = None
    error: APIError | None = None
