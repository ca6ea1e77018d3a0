"""Pydantic models for request/response validation."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


# ---------------------------------------------------------------------------
# User models
# ---------------------------------------------------------------------------


class User(BaseModel):
    """A registered chat user. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str


class RegisterRequest(BaseModel):
    """Request body for claiming a display name."""

    name: Optional[str] = None


class RegisterResponse(BaseModel):
    """Successful registration."""

    status: str = "ok"
    user: User


class ErrorResponse(BaseModel):
    """Failed request, reported with a human-readable reason."""

    status: str = "error"
    message: str


# ---------------------------------------------------------------------------
# Health/Root models
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """Health check response."""

    status: str


class RootResponse(BaseModel):
    """Root endpoint response."""

    status: str
    message: str
