"""
User database model.
"""

from typing import Optional
from uuid import uuid4

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin


class User(Base, TimestampMixin):
    """User account model.

    ``password_hash`` and ``encrypted_aadhaar`` never leave the service layer;
    response schemas do not include them.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
    )

    # Stored lowercased and trimmed, so the unique index is case-insensitive
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # base64(iv):base64(ciphertext)
    encrypted_aadhaar: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id})>"
