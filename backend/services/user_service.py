"""
User service: registration, credential checks and profile retrieval.

Passwords are hashed and the Aadhaar number encrypted before anything is
written; the plaintext Aadhaar only exists again inside get_user_profile.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.user import UserProfile, normalize_email
from core.security import PasswordHasher, SymmetricCipher
from infrastructure.database.models.user import User

logger = logging.getLogger(__name__)


class UserServiceError(Exception):
    """Base class for user service errors."""


class UserAlreadyExistsError(UserServiceError):
    """A user with this email is already registered."""


class UserNotFoundError(UserServiceError):
    """No user matches the given identifier."""


class UserService:
    """
    Service for creating and retrieving user accounts.

    Holds no state beyond its collaborators; create one per request.
    """

    def __init__(self, db: AsyncSession, password_hasher: PasswordHasher, cipher: SymmetricCipher):
        """
        Initialize user service.

        Args:
            db: Async database session
            password_hasher: Hasher for account passwords
            cipher: Cipher for the Aadhaar field
        """
        self.db = db
        self.password_hasher = password_hasher
        self.cipher = cipher

    async def create_user(
        self,
        email: str,
        password: str,
        aadhaar: str,
        name: Optional[str] = None,
    ) -> User:
        """
        Register a new user.

        Args:
            email: Login email (normalized before storage)
            password: Plain text password
            aadhaar: Plain text Aadhaar number
            name: Optional display name

        Returns:
            The persisted user

        Raises:
            UserAlreadyExistsError: If the email is already registered
            InvalidInputError: If the password or Aadhaar is empty
        """
        email = normalize_email(email)

        if await self.find_user_by_email(email):
            raise UserAlreadyExistsError("User with this email already exists")

        user = User(
            email=email,
            password_hash=self.password_hasher.hash(password),
            encrypted_aadhaar=self.cipher.encrypt(aadhaar),
            name=name.strip() if name else None,
        )
        self.db.add(user)

        try:
            await self.db.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent registration for the same email
            await self.db.rollback()
            raise UserAlreadyExistsError("User with this email already exists") from e

        logger.info("Registered user %s", user.id)
        return user

    async def find_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == normalize_email(email)))
        return result.scalar_one_or_none()

    async def find_user_by_id(self, user_id: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def authenticate(self, email: str, password: str) -> Optional[User]:
        """
        Check an email/password pair.

        Returns:
            The user on success, None for an unknown email or wrong password
        """
        user = await self.find_user_by_email(email)
        if not user:
            return None
        if not self.password_hasher.verify(password, user.password_hash):
            return None
        return user

    async def get_user_profile(self, user_id: str) -> UserProfile:
        """
        Load a user's profile with the Aadhaar number decrypted.

        Raises:
            UserNotFoundError: If the user does not exist
            DecryptionError: If the stored Aadhaar cannot be decrypted
        """
        user = await self.find_user_by_id(user_id)
        if not user:
            raise UserNotFoundError("User not found")

        return UserProfile(
            id=user.id,
            email=user.email,
            name=user.name,
            aadhaar=self.cipher.decrypt(user.encrypted_aadhaar),
            created_at=user.created_at,
            updated_at=user.updated_at,
        )

    async def update_user_profile(self, user_id: str, name: Optional[str] = None) -> User:
        """
        Update the mutable profile fields.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        user = await self.find_user_by_id(user_id)
        if not user:
            raise UserNotFoundError("User not found")

        if name is not None:
            user.name = name.strip()

        await self.db.commit()
        return user
