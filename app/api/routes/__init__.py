"""API routes package."""

from fastapi import APIRouter, Depends

from app.api.routes import auth, health, users
from app.core.dependencies import admin_route, protect_route

api_router = APIRouter()

api_router.include_router(health.router, tags=["Health"])
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
# Order matters: verification must run before authorization
api_router.include_router(
    users.router,
    prefix="/users",
    tags=["Users"],
    dependencies=[Depends(protect_route), Depends(admin_route)],
)
