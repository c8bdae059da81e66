"""Registration, login and token refresh."""

from todo_api.auth.models import AccessTokenResponse, AuthResponse
from todo_api.auth.passwords import PasswordHasher
from todo_api.auth.tokens import TokenIssuer
from todo_api.db.models import User
from todo_api.exceptions import UnauthorizedError
from todo_api.logger import get_logger
from todo_api.users.models import NewUser, UserResponse
from todo_api.users.store import UserStore

logger = get_logger(__name__)


class AuthService:
    """Business logic behind /auth/*.

    Args:
        users: User store bound to the request session
        hasher: Password hasher
        issuer: Token issuer
    """

    def __init__(
        self, users: UserStore, hasher: PasswordHasher, issuer: TokenIssuer
    ) -> None:
        self.users = users
        self.hasher = hasher
        self.issuer = issuer

    def create_user(self, new_user: NewUser) -> User:
        """Hash the password and store the user.

        Raises:
            HashingError: bcrypt failed
            ConflictError: email already registered
        """
        password_hash = self.hasher.hash(new_user.password)
        return self.users.create(
            name=new_user.name, email=new_user.email, password_hash=password_hash
        )

    def register(self, new_user: NewUser) -> AuthResponse:
        user = self.create_user(new_user)
        logger.info("Registered user", extra={"user_id": user.id})
        return self._auth_response(user)

    def login(self, email: str, password: str) -> AuthResponse:
        """Authenticate by email and password.

        Raises:
            UnauthorizedError: unknown email or wrong password (indistinguishable)
        """
        user = self.users.get_by_email(email)
        if user is None:
            raise UnauthorizedError("Invalid email or password")
        if not self.hasher.verify(password, user.password_hash):
            logger.info("Failed login", extra={"user_id": user.id})
            raise UnauthorizedError("Invalid email or password")
        return self._auth_response(user)

    def refresh(self, refresh_token: str) -> AccessTokenResponse:
        """Exchange a refresh token for a new access token.

        Raises:
            InvalidTokenError: tampered, expired or otherwise invalid token
        """
        return AccessTokenResponse(
            access_token=self.issuer.refresh(refresh_token),
            expires_in=int(self.issuer.access_ttl.total_seconds()),
        )

    def _auth_response(self, user: User) -> AuthResponse:
        pair = self.issuer.issue_pair(user.id, user.email, user.role)
        return AuthResponse(
            user=UserResponse.model_validate(user),
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            token_type=pair.token_type,
            expires_in=pair.expires_in,
        )
