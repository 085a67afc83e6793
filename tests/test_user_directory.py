"""Tests for the user directory collaborator."""

import asyncio

import pytest

from app.models.user import User, UserRole
from app.schemas.user import UserCreate
from app.services.user_directory import EmailAlreadyRegistered, UserDirectory


def new_user(email: str = "ada@example.com", password: str = "correct-horse") -> UserCreate:
    return UserCreate(name="Ada", email=email, password=password)


class TestCreate:

    @pytest.mark.asyncio
    async def test_creates_member_with_hashed_password(self, db):
        user = await UserDirectory.create_if_absent(db, new_user())

        assert user.id
        assert user.role == UserRole.MEMBER
        assert user.hashed_password != "correct-horse"
        assert await UserDirectory.verify_password("correct-horse", user.hashed_password)

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, db):
        await UserDirectory.create_if_absent(db, new_user())
        await db.commit()

        with pytest.raises(EmailAlreadyRegistered):
            await UserDirectory.create_if_absent(db, new_user(password="another-one"))

    @pytest.mark.asyncio
    async def test_email_is_case_insensitive(self, db):
        await UserDirectory.create_if_absent(db, new_user("Ada@Example.com"))
        await db.commit()

        with pytest.raises(EmailAlreadyRegistered):
            await UserDirectory.create_if_absent(db, new_user("ada@example.com"))

    def test_email_column_is_unique(self):
        assert User.__table__.c.email.unique


class TestLookup:

    @pytest.mark.asyncio
    async def test_identity_has_no_password_hash(self, db):
        user = await UserDirectory.create_if_absent(db, new_user())

        identity = await UserDirectory.get_identity(db, user.id)

        assert identity.email == "ada@example.com"
        assert identity.role == UserRole.MEMBER
        assert "hashed_password" not in identity.model_dump()

    @pytest.mark.asyncio
    async def test_identity_missing(self, db):
        assert await UserDirectory.get_identity(db, "no-such-id") is None

    @pytest.mark.asyncio
    async def test_list_identities(self, db):
        await UserDirectory.create_if_absent(db, new_user("a@example.com"))
        await UserDirectory.create_if_absent(db, new_user("b@example.com"))

        emails = {u.email for u in await UserDirectory.list_identities(db)}
        assert emails == {"a@example.com", "b@example.com"}

    @pytest.mark.asyncio
    async def test_set_role(self, db):
        user = await UserDirectory.create_if_absent(db, new_user())
        await UserDirectory.set_role(db, user.id, UserRole.ADMIN)

        identity = await UserDirectory.get_identity(db, user.id)
        assert identity.role == UserRole.ADMIN


class TestAuthenticate:

    @pytest.mark.asyncio
    async def test_correct_password(self, db):
        await UserDirectory.create_if_absent(db, new_user())
        user = await UserDirectory.authenticate(db, "ADA@example.com", "correct-horse")
        assert user is not None

    @pytest.mark.asyncio
    async def test_wrong_password(self, db):
        await UserDirectory.create_if_absent(db, new_user())
        assert await UserDirectory.authenticate(db, "ada@example.com", "wrong") is None

    @pytest.mark.asyncio
    async def test_unknown_email(self, db):
        assert await UserDirectory.authenticate(db, "ghost@example.com", "whatever") is None

    @pytest.mark.asyncio
    async def test_hashing_does_not_block_event_loop(self, db):
        await UserDirectory.create_if_absent(db, new_user())
        done = asyncio.Event()
        ticks = 0

        async def ticker():
            nonlocal ticks
            while not done.is_set():
                ticks += 1
                await asyncio.sleep(0.005)

        async def login():
            try:
                return await UserDirectory.authenticate(db, "ada@example.com", "correct-horse")
            finally:
                done.set()

        _, user = await asyncio.gather(ticker(), login())

        assert user is not None
        # bcrypt takes well over 50ms; the loop kept running meanwhile
        assert ticks >= 10
