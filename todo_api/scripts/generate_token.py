"""Generate JWT tokens for todo-api operators."""

# ruff: noqa: T201 - CLI output

import argparse

from todo_api.auth.tokens import TokenIssuer
from todo_api.config import settings


def main(argv: list[str] | None = None) -> None:
    """Generate an access/refresh token pair."""
    parser = argparse.ArgumentParser(
        description="Generate a JWT token pair for todo-api"
    )
    parser.add_argument(
        "--user-id",
        type=int,
        required=True,
        help="Id of the user the tokens are issued for",
    )
    parser.add_argument(
        "--email",
        required=True,
        help="Email of the user (token subject)",
    )
    parser.add_argument(
        "--role",
        default="user",
        help="Role claim (default: user)",
    )

    args = parser.parse_args(argv)

    pair = TokenIssuer.from_settings(settings.auth).issue_pair(
        args.user_id, args.email.lower(), args.role
    )

    print(f"Subject: {args.email.lower()}")
    print(f"Expires: {pair.expires_in} seconds")
    print(f"Access token: {pair.access_token}")
    print(f"Refresh token: {pair.refresh_token}")


if __name__ == "__main__":
    main()
