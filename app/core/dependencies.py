"""
Request dependencies, including the two-stage auth chain.

Stage 1, ``protect_route``: access token cookie -> signer -> user directory,
then ``request.state.user`` is set.
Stage 2, ``admin_route``: reads ``request.state.user`` and admits admins only.
Without a prior stage 1 it fails closed.
"""

import logging
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cookies import CookieTransport, get_cookie_transport
from app.core.errors import AuthReason, ForbiddenError, TokenError, UnauthorizedError
from app.core.security import TokenKind, TokenSigner, get_token_signer
from app.db.session import get_db
from app.models.user import UserRole
from app.schemas.user import UserIdentity
from app.services.user_directory import UserDirectory

logger = logging.getLogger(__name__)

DbSession = Annotated[AsyncSession, Depends(get_db)]
Signer = Annotated[TokenSigner, Depends(get_token_signer)]
Cookies = Annotated[CookieTransport, Depends(get_cookie_transport)]


async def protect_route(
    request: Request,
    db: DbSession,
    signer: Signer,
    cookies: Cookies,
) -> UserIdentity:
    """Verification stage."""
    access_token = cookies.extract(request).access_token
    if not access_token:
        raise UnauthorizedError(AuthReason.NO_TOKEN, "Unauthorized - No access token")

    try:
        claims = signer.verify(access_token, TokenKind.ACCESS)
    except TokenError as exc:
        logger.debug(f"Access token rejected on {request.url.path}: {exc}")
        raise UnauthorizedError(AuthReason.BAD_TOKEN, "Unauthorized - Invalid or expired access token")

    user = await UserDirectory.get_identity(db, claims.user_id)
    if user is None:
        raise UnauthorizedError(AuthReason.USER_NOT_FOUND, "Unauthorized - User not found")

    request.state.user = user
    return user


async def admin_route(request: Request) -> UserIdentity:
    """Authorization stage. Must be declared after ``protect_route``."""
    user = getattr(request.state, "user", None)
    if not isinstance(user, UserIdentity):
        logger.error(f"admin_route reached without an identity on {request.url.path}")
        raise ForbiddenError(AuthReason.NO_IDENTITY, "Access denied - Not authenticated")

    if user.role != UserRole.ADMIN:
        raise ForbiddenError(AuthReason.ADMIN_ONLY, "Access denied - Admin only")
    return user


CurrentUser = Annotated[UserIdentity, Depends(protect_route)]
