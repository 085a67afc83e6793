"""User administration endpoints. Mounted behind both auth stages."""

from typing import List

from fastapi import APIRouter

from app.core.dependencies import DbSession
from app.schemas.user import UserIdentity
from app.services.user_directory import UserDirectory

router = APIRouter()


@router.get("", response_model=List[UserIdentity])
async def list_users(db: DbSession):
    """List every user."""
    return await UserDirectory.list_identities(db)
