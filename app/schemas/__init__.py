"""Pydantic schemas for request/response validation."""

from app.schemas.user import (
    UserCreate,
    UserLogin,
    UserIdentity,
    AuthResponse,
    MessageResponse,
)

__all__ = [
    "UserCreate",
    "UserLogin",
    "UserIdentity",
    "AuthResponse",
    "MessageResponse",
]
