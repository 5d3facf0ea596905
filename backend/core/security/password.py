"""
Password hashing utilities using bcrypt.
"""

from passlib.context import CryptContext

from .errors import ConfigurationError, InvalidInputError

DEFAULT_ROUNDS = 10

# bcrypt accepts log2 cost factors in this range
MIN_ROUNDS = 4
MAX_ROUNDS = 31


class PasswordHasher:
    """Password hashing and verification using bcrypt."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        """
        Initialize the hasher.

        Args:
            rounds: bcrypt work factor (log2 of the iteration count)

        Raises:
            ConfigurationError: If rounds is outside bcrypt's supported range
        """
        if isinstance(rounds, bool) or not isinstance(rounds, int):
            raise ConfigurationError("Password hash rounds must be an integer")
        if not MIN_ROUNDS <= rounds <= MAX_ROUNDS:
            raise ConfigurationError(
                f"Password hash rounds must be between {MIN_ROUNDS} and {MAX_ROUNDS}, got {rounds}"
            )

        self._rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
            bcrypt__min_rounds=rounds,
            bcrypt__max_rounds=rounds,
        )

    @property
    def rounds(self) -> int:
        return self._rounds

    def hash(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password to hash

        Returns:
            Hashed password string with an embedded random salt

        Raises:
            InvalidInputError: If password is empty or not a string
        """
        if not isinstance(password, str):
            raise InvalidInputError("Password must be a string")
        if not password:
            raise InvalidInputError("Password cannot be empty")

        return self._context.hash(password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against a hash.

        Args:
            plain_password: Plain text password to verify
            hashed_password: Hashed password to check against

        Returns:
            True if password matches, False otherwise

        Raises:
            InvalidInputError: If either argument is missing or the hash is unrecognised
        """
        if not plain_password or not hashed_password:
            raise InvalidInputError("Password and hashed password are required")
        if not isinstance(plain_password, str) or not isinstance(hashed_password, str):
            raise InvalidInputError("Password and hashed password must be strings")

        try:
            return self._context.verify(plain_password, hashed_password)
        except ValueError as e:
            raise InvalidInputError(f"Unrecognised password hash: {e}") from e

    def needs_rehash(self, hashed_password: str) -> bool:
        """
        Check if a password hash was produced with different parameters.

        Args:
            hashed_password: Hashed password to check

        Returns:
            True if rehash is needed, False otherwise
        """
        return self._context.needs_update(hashed_password)
