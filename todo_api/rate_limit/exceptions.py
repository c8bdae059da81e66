"""Rate limiting exceptions."""

from fastapi import status

from todo_api.exceptions import APIError, ErrorCode


class RateLimitExceeded(APIError):  # noqa: N818 - "Exceeded" suffix is more descriptive than "Error" for rate limiting
    """Raised when a client has no tokens left."""

    code = ErrorCode.TOO_MANY_REQUESTS

    def __init__(self, message: str, retry_after: float = 1.0) -> None:
        """Initialize RateLimitExceeded exception with 429 status code."""
        super().__init__(message, status_code=status.HTTP_429_TOO_MANY_REQUESTS)
        self.retry_after = retry_after
