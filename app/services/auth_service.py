"""Session lifecycle: signup, login, logout and refresh."""

import hmac
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import (
    AuthReason,
    ConflictError,
    SessionStoreError,
    TokenError,
    UnauthorizedError,
)
from app.core.security import TokenKind, TokenPair, TokenSigner, get_token_signer
from app.db.session import get_db
from app.models.user import User
from app.schemas.user import UserCreate, UserIdentity
from app.services.session_store import SessionStore, get_session_store
from app.services.user_directory import EmailAlreadyRegistered, UserDirectory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedSession:
    """Identity plus the token pair that was just persisted for it."""
    user: UserIdentity
    tokens: TokenPair


class AuthService:
    """
    Orchestrates the signer, the session store and the user directory.

    A user has at most one live refresh token: login overwrites the stored
    value, logout deletes it, refresh only reads it.
    """

    def __init__(self, db: AsyncSession, store: SessionStore, signer: TokenSigner):
        self.db = db
        self.store = store
        self.signer = signer

    async def _issue(self, user: User) -> IssuedSession:
        tokens = self.signer.mint(user.id)
        await self.store.put(user.id, tokens.refresh_token)
        return IssuedSession(user=UserIdentity.model_validate(user), tokens=tokens)

    # ─── Signup ──────────────────────────────────
    async def signup(self, user_data: UserCreate) -> IssuedSession:
        try:
            user = await UserDirectory.create_if_absent(self.db, user_data)
        except EmailAlreadyRegistered:
            logger.info(f"Signup rejected, email taken: {user_data.email[:3]}***")
            raise ConflictError(AuthReason.EMAIL_TAKEN, "User already exists")

        issued = await self._issue(user)
        logger.info(f"User signed up: {user.id}")
        return issued

    # ─── Login ───────────────────────────────────
    async def login(self, email: str, password: str) -> IssuedSession:
        user = await UserDirectory.authenticate(self.db, email, password)
        if not user:
            logger.info(f"Failed login for {email[:3]}***")
            raise UnauthorizedError(AuthReason.INVALID_CREDENTIALS, "Invalid email or password")

        # Overwrites any earlier session for this user
        issued = await self._issue(user)
        logger.info(f"User logged in: {user.id}")
        return issued

    # ─── Logout (lenient) ───────────────────────
    async def logout(self, refresh_token: Optional[str]) -> Optional[str]:
        """
        Best-effort server-side cleanup. Returns the user id whose session
        was deleted, or None. Never raises for token or store problems.
        """
        if not refresh_token:
            return None

        try:
            claims = self.signer.verify(refresh_token, TokenKind.REFRESH)
        except TokenError as exc:
            logger.warning(f"Logout with unusable refresh token: {exc}")
            return None

        try:
            await self.store.delete(claims.user_id)
        except SessionStoreError as exc:
            logger.warning(f"Logout could not delete session for {claims.user_id}: {exc}")
            return None

        logger.info(f"User logged out: {claims.user_id}")
        return claims.user_id

    # ─── Refresh (access token only) ────────────
    async def refresh(self, refresh_token: Optional[str]) -> str:
        """
        Exchange a live refresh token for a new access token.

        The stored refresh token and its expiry are left untouched, so a
        session ends a fixed interval after login.
        """
        if not refresh_token:
            raise UnauthorizedError(AuthReason.NO_TOKEN, "No refresh token provided")

        try:
            claims = self.signer.verify(refresh_token, TokenKind.REFRESH)
        except TokenError as exc:
            logger.info(f"Refresh rejected: {exc}")
            raise UnauthorizedError(AuthReason.BAD_TOKEN, "Invalid or expired refresh token")

        stored = await self.store.get(claims.user_id)
        if stored is None or not hmac.compare_digest(stored, refresh_token):
            logger.info(f"Refresh rejected, stale session for {claims.user_id}")
            raise UnauthorizedError(AuthReason.STALE_TOKEN, "Refresh token is no longer valid")

        return self.signer.mint_access(claims.user_id)


def get_auth_service(
    db: AsyncSession = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
    signer: TokenSigner = Depends(get_token_signer),
) -> AuthService:
    return AuthService(db, store, signer)
