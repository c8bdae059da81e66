"""Authentication: password hashing, token issuing and the auth endpoints."""

from todo_api.auth.passwords import HashingError, PasswordHasher
from todo_api.auth.tokens import InvalidTokenError, TokenIssuer

__all__ = [
    "HashingError",
    "InvalidTokenError",
    "PasswordHasher",
    "TokenIssuer",
]
