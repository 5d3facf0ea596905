# Domain Entities
# Pure business objects with no external dependencies
from .user import UserProfile, normalize_email

__all__ = [
    "UserProfile",
    "normalize_email",
]
