"""Credential signer: mint and verify access / refresh JWTs."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from functools import lru_cache
from typing import Optional

from jose import JWTError, jwt

from app.core.config import Settings, get_settings
from app.core.errors import TokenExpiredError, TokenInvalidError


class TokenKind(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class SigningKeys:
    """Process-wide signing material, built once at startup."""
    access_secret: str
    refresh_secret: str
    algorithm: str = "HS256"
    access_ttl: timedelta = timedelta(minutes=15)
    refresh_ttl: timedelta = timedelta(days=7)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SigningKeys":
        return cls(
            access_secret=settings.access_token_secret,
            refresh_secret=settings.refresh_token_secret,
            algorithm=settings.jwt_algorithm,
            access_ttl=timedelta(minutes=settings.access_token_expire_minutes),
            refresh_ttl=timedelta(days=settings.refresh_token_expire_days),
        )


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    kind: TokenKind
    jti: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenSigner:
    """Signs and verifies the two token kinds with two distinct secrets."""

    def __init__(self, keys: SigningKeys):
        self.keys = keys

    def _secret(self, kind: TokenKind) -> str:
        return self.keys.access_secret if kind is TokenKind.ACCESS else self.keys.refresh_secret

    def _ttl(self, kind: TokenKind) -> timedelta:
        return self.keys.access_ttl if kind is TokenKind.ACCESS else self.keys.refresh_ttl

    # ─── Minting ───────────────────────────────
    def mint_token(self, user_id: str, kind: TokenKind, now: Optional[datetime] = None) -> str:
        issued = now or _utcnow()
        payload = {
            "sub": str(user_id),
            "jti": str(uuid.uuid4()),
            "iat": int(issued.timestamp()),
            "exp": int((issued + self._ttl(kind)).timestamp()),
            "type": kind.value,
        }
        return jwt.encode(payload, self._secret(kind), algorithm=self.keys.algorithm)

    def mint_access(self, user_id: str, now: Optional[datetime] = None) -> str:
        return self.mint_token(user_id, TokenKind.ACCESS, now)

    def mint(self, user_id: str, now: Optional[datetime] = None) -> TokenPair:
        """Mint a fresh access + refresh pair for ``user_id``."""
        return TokenPair(
            access_token=self.mint_token(user_id, TokenKind.ACCESS, now),
            refresh_token=self.mint_token(user_id, TokenKind.REFRESH, now),
        )

    # ─── Verification ──────────────────────────
    def verify(self, token: str, kind: TokenKind, now: Optional[datetime] = None) -> TokenClaims:
        """
        Check signature, kind and expiry of ``token``.

        Raises TokenExpiredError when ``now >= exp`` and TokenInvalidError for
        every other failure. Expiry is checked here rather than by jose so the
        boundary is exclusive and ``now`` can be supplied.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret(kind),
                algorithms=[self.keys.algorithm],
                options={"verify_exp": False},
            )
        except JWTError as exc:
            raise TokenInvalidError(str(exc)) from exc

        if payload.get("type") != kind.value:
            raise TokenInvalidError(f"expected a {kind.value} token")

        try:
            user_id = str(payload["sub"])
            jti = str(payload["jti"])
            issued_at = datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
        except (KeyError, TypeError, ValueError) as exc:
            raise TokenInvalidError("missing or malformed claims") from exc

        if (now or _utcnow()) >= expires_at:
            raise TokenExpiredError(f"{kind.value} token expired")

        return TokenClaims(
            user_id=user_id,
            kind=kind,
            jti=jti,
            issued_at=issued_at,
            expires_at=expires_at,
        )


@lru_cache()
def get_token_signer() -> TokenSigner:
    """Signer bound to the configured keys."""
    return TokenSigner(SigningKeys.from_settings(get_settings()))
