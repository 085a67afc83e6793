"""
Error taxonomy for the session core.

Two families that never share a handler:
- credential / authorization failures (``TokenError`` inside the core,
  ``AuthError`` at the HTTP edge), surfaced as 400/401/403/429
- infrastructure failures (``SessionStoreError``), surfaced as 500
"""

from enum import Enum
from typing import Dict, Optional

from fastapi import HTTPException, status


class AuthReason(str, Enum):
    """Stable, machine-readable failure reasons."""
    EMAIL_TAKEN = "EmailTaken"
    INVALID_CREDENTIALS = "InvalidCredentials"
    NO_TOKEN = "NoToken"
    BAD_TOKEN = "BadToken"
    STALE_TOKEN = "StaleToken"
    USER_NOT_FOUND = "UserNotFound"
    ADMIN_ONLY = "AdminOnly"
    NO_IDENTITY = "NoIdentity"
    TOO_MANY_REQUESTS = "TooManyRequests"
    SERVER_ERROR = "ServerError"


# ─────────────────────────────────────────────
# Token verification failures
# ─────────────────────────────────────────────

class TokenError(Exception):
    """Base class for token verification failures."""


class TokenExpiredError(TokenError):
    """Token signature is fine but ``now`` is at or past ``exp``."""


class TokenInvalidError(TokenError):
    """Bad signature, malformed token or wrong token kind."""


# ─────────────────────────────────────────────
# Infrastructure failures
# ─────────────────────────────────────────────

class SessionStoreError(Exception):
    """The session store could not be reached or answered with an error."""


# ─────────────────────────────────────────────
# HTTP-facing failures
# ─────────────────────────────────────────────

class AuthError(HTTPException):
    """HTTPException carrying a stable ``reason`` next to a human message."""

    status_code_default = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        reason: AuthReason,
        message: str,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.reason = reason
        super().__init__(
            status_code=self.status_code_default,
            detail={"reason": reason.value, "message": message},
            headers=headers,
        )


class ConflictError(AuthError):
    status_code_default = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(AuthError):
    status_code_default = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(AuthError):
    status_code_default = status.HTTP_403_FORBIDDEN


class RateLimitedError(AuthError):
    status_code_default = status.HTTP_429_TOO_MANY_REQUESTS
