"""Domain services for the users app."""

from .auth import AuthenticationFailed, AuthService

__all__ = [
    "AuthService",
    "AuthenticationFailed",
]
