"""User domain entities."""

from dataclasses import dataclass
from datetime import datetime


def normalize_email(email: str) -> str:
    """Emails are unique case-insensitively and stored trimmed/lowercased."""
    return email.strip().lower()


@dataclass(frozen=True)
class UserProfile:
    """Profile view of a user, with the Aadhaar number decrypted for display."""

    id: str
    email: str
    name: str | None
    aadhaar: str
    created_at: datetime
    updated_at: datetime
