"""JWT access/refresh token issuing and validation."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from jose import JWTError, jwt
from pydantic import ValidationError as PydanticValidationError

from todo_api.exceptions import UnauthorizedError
from todo_api.logger import get_logger
from todo_api.models import TokenClaims, TokenPair

if TYPE_CHECKING:
    from todo_api.config import AuthSettings

logger = get_logger(__name__)

_REQUIRED_CLAIMS = ("exp", "iat", "nbf", "sub", "iss")


class InvalidTokenError(UnauthorizedError):
    """Token signature, algorithm, lifetime or claims are not acceptable."""

    def __init__(self, details: str | None = None) -> None:
        super().__init__("Invalid or expired token", details)


class TokenIssuer:
    """Creates and validates signed, time-limited tokens carrying identity claims.

    Access and refresh tokens carry the same claims and differ only in expiry.
    Refresh is stateless: a refresh token is not recorded anywhere and can be
    replayed until it expires.
    """

    def __init__(
        self,
        secret_key: str,
        *,
        algorithm: str = "HS256",
        issuer: str = "todo-list-api",
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
    ) -> None:
        if not secret_key:
            raise ValueError("JWT secret key must not be empty")
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.issuer = issuer
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl

    @classmethod
    def from_settings(cls, auth: AuthSettings) -> TokenIssuer:
        return cls(
            auth.jwt_secret_key.get_secret_value(),
            algorithm=auth.jwt_algorithm,
            issuer=auth.jwt_issuer,
            access_ttl=timedelta(minutes=auth.access_token_expire_minutes),
            refresh_ttl=timedelta(days=auth.refresh_token_expire_days),
        )

    def issue_pair(self, user_id: int, email: str, role: str) -> TokenPair:
        """Issue an access token and a refresh token for the same identity."""
        return TokenPair(
            access_token=self._encode(user_id, email, role, self.access_ttl),
            refresh_token=self._encode(user_id, email, role, self.refresh_ttl),
            expires_in=int(self.access_ttl.total_seconds()),
        )

    def issue_access_token(self, user_id: int, email: str, role: str) -> str:
        return self._encode(user_id, email, role, self.access_ttl)

    def validate(self, token: str) -> TokenClaims:
        """Decode and validate a token.

        Args:
            token: Encoded JWT

        Returns:
            Decoded claims

        Raises:
            InvalidTokenError: bad signature, unexpected algorithm, expired or
                not yet valid, wrong issuer, or missing claims
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={f"require_{claim}": True for claim in _REQUIRED_CLAIMS},
            )
            return TokenClaims.model_validate(payload)
        except (JWTError, PydanticValidationError) as e:
            raise InvalidTokenError(details=str(e)) from e

    def refresh(self, refresh_token: str) -> str:
        """Mint a new access token from a valid refresh token.

        The refresh token itself stays valid (no rotation, no revocation).
        """
        claims = self.validate(refresh_token)
        logger.debug("Refreshing access token", extra={"user_id": claims.user_id})
        return self.issue_access_token(claims.user_id, claims.email, claims.role)

    def _encode(self, user_id: int, email: str, role: str, ttl: timedelta) -> str:
        now = datetime.now(UTC)
        payload = {
            "user_id": user_id,
            "email": email,
            "role": role,
            "sub": email,
            "iss": self.issuer,
            "iat": int(now.timestamp()),
            "nbf": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self.algorithm)
