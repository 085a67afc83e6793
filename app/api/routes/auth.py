"""Authentication endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status

from app.core.dependencies import Cookies, CurrentUser
from app.core.rate_limiter import check_rate_limit, get_client_ip, rate_limiter
from app.schemas.user import (
    AuthResponse,
    MessageResponse,
    UserCreate,
    UserIdentity,
    UserLogin,
)
from app.services.auth_service import AuthService, get_auth_service

router = APIRouter()

Auth = Annotated[AuthService, Depends(get_auth_service)]


# ─────────────────────────────────────────────
# Signup
# ─────────────────────────────────────────────

@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    user_data: UserCreate,
    request: Request,
    response: Response,
    auth: Auth,
    cookies: Cookies,
):
    """
    Register a new user and start their session.
    Tokens are delivered as httpOnly cookies, never in the body.
    """
    check_rate_limit("signup_ip", get_client_ip(request))

    issued = await auth.signup(user_data)
    cookies.attach(response, issued.tokens.access_token, issued.tokens.refresh_token)
    return AuthResponse(user=issued.user, message="User created successfully")


# ─────────────────────────────────────────────
# Login
# ─────────────────────────────────────────────

@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: UserLogin,
    request: Request,
    response: Response,
    auth: Auth,
    cookies: Cookies,
):
    """
    Authenticate a user.
    Any session the user had before is replaced by this one.
    """
    client_ip = get_client_ip(request)
    check_rate_limit("login_ip", client_ip)

    issued = await auth.login(credentials.email, credentials.password)
    rate_limiter.reset("login_ip", client_ip)

    cookies.attach(response, issued.tokens.access_token, issued.tokens.refresh_token)
    return AuthResponse(user=issued.user, message="Logged in successfully")


# ─────────────────────────────────────────────
# Logout
# ─────────────────────────────────────────────

@router.post("/logout", response_model=MessageResponse)
async def logout(request: Request, response: Response, auth: Auth, cookies: Cookies):
    """End the session. Cookies are cleared whatever happens server-side."""
    await auth.logout(cookies.extract(request).refresh_token)
    cookies.clear(response)
    return MessageResponse(message="Logged out successfully")


# ─────────────────────────────────────────────
# Refresh (access token only)
# ─────────────────────────────────────────────

@router.post("/refresh", response_model=MessageResponse)
async def refresh(request: Request, response: Response, auth: Auth, cookies: Cookies):
    """Issue a new access token from the refresh token cookie."""
    access_token = await auth.refresh(cookies.extract(request).refresh_token)
    cookies.attach(response, access_token)
    return MessageResponse(message="Token refreshed successfully")


# ─────────────────────────────────────────────
# Current User
# ─────────────────────────────────────────────

@router.get("/me", response_model=UserIdentity)
async def get_current_user(current_user: CurrentUser):
    """Return authenticated user's info."""
    return current_user
