"""
Unit tests for UserService against an in-memory database.
"""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain import UserProfile
from core.security import DecryptionError, InvalidInputError, SymmetricCipher
from infrastructure.database.models import User
from services.user_service import UserAlreadyExistsError, UserNotFoundError, UserService

TEST_PASSWORD = "TestPass123"
TEST_AADHAAR = "123456789012"

pytestmark = pytest.mark.asyncio


class TestCreateUser:
    async def test_stores_only_protected_values(self, user_service: UserService, db_session: AsyncSession):
        user = await user_service.create_user(
            email="new@example.com",
            password=TEST_PASSWORD,
            aadhaar=TEST_AADHAAR,
            name="New User",
        )

        stored = (await db_session.execute(select(User).where(User.id == user.id))).scalar_one()
        assert stored.password_hash.startswith("$2b$")
        assert stored.password_hash != TEST_PASSWORD
        assert TEST_AADHAAR not in stored.encrypted_aadhaar
        assert ":" in stored.encrypted_aadhaar
        assert stored.created_at is not None

    async def test_email_is_normalized(self, user_service: UserService):
        user = await user_service.create_user(
            email="  Mixed.Case@Example.COM ",
            password=TEST_PASSWORD,
            aadhaar=TEST_AADHAAR,
        )
        assert user.email == "mixed.case@example.com"
        assert user.name is None

    async def test_duplicate_email_rejected(self, user_service: UserService, test_user: User):
        with pytest.raises(UserAlreadyExistsError):
            await user_service.create_user(
                email="TEST@example.com",
                password=TEST_PASSWORD,
                aadhaar="234567890123",
            )

    async def test_empty_password_rejected(self, user_service: UserService):
        with pytest.raises(InvalidInputError):
            await user_service.create_user(email="a@example.com", password="", aadhaar=TEST_AADHAAR)

    async def test_empty_aadhaar_rejected(self, user_service: UserService):
        with pytest.raises(InvalidInputError):
            await user_service.create_user(email="a@example.com", password=TEST_PASSWORD, aadhaar="")


class TestLookup:
    async def test_find_by_email_is_case_insensitive(self, user_service: UserService, test_user: User):
        found = await user_service.find_user_by_email(" Test@Example.com")
        assert found is not None
        assert found.id == test_user.id

    async def test_find_by_id(self, user_service: UserService, test_user: User):
        assert (await user_service.find_user_by_id(test_user.id)).email == test_user.email

    async def test_unknown_user(self, user_service: UserService):
        assert await user_service.find_user_by_email("nobody@example.com") is None
        assert await user_service.find_user_by_id("00000000-0000-0000-0000-000000000000") is None


class TestAuthenticate:
    async def test_correct_password(self, user_service: UserService, test_user: User):
        user = await user_service.authenticate("test@example.com", TEST_PASSWORD)
        assert user is not None
        assert user.id == test_user.id

    async def test_wrong_password(self, user_service: UserService, test_user: User):
        assert await user_service.authenticate("test@example.com", "WrongPass123") is None

    async def test_unknown_email(self, user_service: UserService):
        assert await user_service.authenticate("nobody@example.com", TEST_PASSWORD) is None


class TestProfile:
    async def test_profile_has_decrypted_aadhaar(self, user_service: UserService, test_user: User):
        profile = await user_service.get_user_profile(test_user.id)

        assert isinstance(profile, UserProfile)
        assert profile.aadhaar == TEST_AADHAAR
        assert profile.email == "test@example.com"
        assert profile.name == "Test User"

    async def test_missing_user(self, user_service: UserService):
        with pytest.raises(UserNotFoundError):
            await user_service.get_user_profile("00000000-0000-0000-0000-000000000000")

    async def test_corrupted_aadhaar_raises(self, user_service: UserService, test_user: User, db_session):
        test_user.encrypted_aadhaar = "AAAAAAAAAAAAAAAAAAAAAA==:AAAA"
        await db_session.commit()

        with pytest.raises(DecryptionError):
            await user_service.get_user_profile(test_user.id)

    async def test_other_key_cannot_read_profile(self, db_session, password_hasher, test_user: User):
        other = UserService(db_session, password_hasher, SymmetricCipher("fedcba9876543210fedcba9876543210"))
        try:
            profile = await other.get_user_profile(test_user.id)
        except DecryptionError:
            return
        assert profile.aadhaar != TEST_AADHAAR

    async def test_update_name(self, user_service: UserService, test_user: User):
        user = await user_service.update_user_profile(test_user.id, name="  Renamed User ")
        assert user.name == "Renamed User"

        profile = await user_service.get_user_profile(test_user.id)
        assert profile.name == "Renamed User"
        assert profile.aadhaar == TEST_AADHAAR

    async def test_update_without_changes(self, user_service: UserService, test_user: User):
        user = await user_service.update_user_profile(test_user.id)
        assert user.name == "Test User"

    async def test_update_missing_user(self, user_service: UserService):
        with pytest.raises(UserNotFoundError):
            await user_service.update_user_profile("00000000-0000-0000-0000-000000000000", name="Nobody")
