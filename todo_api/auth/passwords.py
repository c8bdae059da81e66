"""One-way password hashing with bcrypt."""

import bcrypt

from todo_api.exceptions import InternalError


class HashingError(InternalError):
    """The hashing primitive failed."""

    def __init__(self, details: str | None = None) -> None:
        super().__init__("Could not hash password", details)


class PasswordHasher:
    """Salted, adaptive password hashing.

    Digests are bcrypt modular-crypt strings ($2b$<cost>$...). bcrypt only looks
    at the first 72 bytes of a password, longer inputs are rejected by the
    request models.
    """

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def hash(self, plaintext: str) -> str:
        try:
            digest = bcrypt.hashpw(
                plaintext.encode("utf-8"), bcrypt.gensalt(rounds=self.rounds)
            )
        except (ValueError, TypeError) as e:
            raise HashingError(details=str(e)) from e
        return digest.decode("utf-8")

    def verify(self, plaintext: str, digest: str) -> bool:
        """Check plaintext against digest. Malformed digests never match."""
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), digest.encode("utf-8"))
        except (ValueError, TypeError):
            return False
