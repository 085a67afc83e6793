"""User directory: the user records consumed by the session core."""

import logging
from typing import List, Optional

from passlib.context import CryptContext
from starlette.concurrency import run_in_threadpool
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User, UserRole
from app.schemas.user import UserCreate, UserIdentity

logger = logging.getLogger(__name__)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Precomputed fake hash so unknown emails cost the same as wrong passwords
FAKE_HASHED_PASSWORD = pwd_context.hash("never-a-real-password-for-a-missing-user")

# Everything except the password hash
IDENTITY_COLUMNS = (User.id, User.name, User.email, User.role, User.created_at)


class EmailAlreadyRegistered(ValueError):
    """The unique email constraint rejected a new user."""


class UserDirectory:
    """Data access for users; passwords are only ever compared as hashes."""

    # ─── Password (bcrypt runs in the threadpool) ─
    @staticmethod
    async def hash_password(password: str) -> str:
        return await run_in_threadpool(pwd_context.hash, password)

    @staticmethod
    async def verify_password(plain: str, hashed: str) -> bool:
        return await run_in_threadpool(pwd_context.verify, plain, hashed)

    # ─── Lookup ──────────────────────────────────
    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_identity(db: AsyncSession, user_id: str) -> Optional[UserIdentity]:
        """Load a user by id without selecting the password hash."""
        result = await db.execute(select(*IDENTITY_COLUMNS).where(User.id == user_id))
        row = result.first()
        if row is None:
            return None
        return UserIdentity.model_validate(row._asdict())

    @staticmethod
    async def list_identities(db: AsyncSession) -> List[UserIdentity]:
        result = await db.execute(select(*IDENTITY_COLUMNS).order_by(User.created_at))
        return [UserIdentity.model_validate(row._asdict()) for row in result.all()]

    # ─── Creation ────────────────────────────────
    @staticmethod
    async def create_if_absent(
        db: AsyncSession,
        user_data: UserCreate,
        role: UserRole = UserRole.MEMBER,
    ) -> User:
        """
        Insert and commit a new user.

        There is no separate existence check: the unique index on ``email``
        decides, so two concurrent signups cannot both succeed. The row is
        committed here so it exists before any session is issued for it.
        """
        user = User(
            name=user_data.name,
            email=user_data.email.lower(),
            hashed_password=await UserDirectory.hash_password(user_data.password),
            role=role,
        )
        db.add(user)
        try:
            await db.commit()
        except IntegrityError as exc:
            await db.rollback()
            raise EmailAlreadyRegistered("Email already registered") from exc
        await db.refresh(user)
        return user

    @staticmethod
    async def set_role(db: AsyncSession, user_id: str, role: UserRole) -> None:
        """Out-of-band role change (admin bootstrap only)."""
        await db.execute(update(User).where(User.id == user_id).values(role=role))
        logger.info(f"Role of user {user_id} set to {role.value}")

    # ─── Authentication (constant-time) ─────────
    @staticmethod
    async def authenticate(db: AsyncSession, email: str, password: str) -> Optional[User]:
        user = await UserDirectory.get_by_email(db, email)
        hashed_password = user.hashed_password if user else FAKE_HASHED_PASSWORD
        password_correct = await UserDirectory.verify_password(password, hashed_password)

        if not user or not password_correct:
            return None
        return user
