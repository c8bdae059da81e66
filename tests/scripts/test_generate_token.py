from unittest.mock import patch

import pytest

from todo_api.auth.tokens import TokenIssuer
from todo_api.config import settings
from todo_api.scripts import generate_token, serve


def _printed(output: str) -> dict[str, str]:
    return dict(line.split(": ", 1) for line in output.strip().splitlines())


def test_generate_token_prints_valid_pair(
    capsys: pytest.CaptureFixture[str], token_issuer: TokenIssuer
) -> None:
    generate_token.main(["--user-id", "7", "--email", "Ops@Example.com"])

    printed = _printed(capsys.readouterr().out)
    assert printed["Subject"] == "ops@example.com"
    assert printed["Expires"] == "900 seconds"

    claims = token_issuer.validate(printed["Access token"])
    assert claims.user_id == 7
    assert claims.email == "ops@example.com"
    assert claims.role == "user"
    assert token_issuer.validate(printed["Refresh token"]).user_id == 7


def test_generate_token_custom_role(
    capsys: pytest.CaptureFixture[str], token_issuer: TokenIssuer
) -> None:
    generate_token.main(
        ["--user-id", "1", "--email", "admin@example.com", "--role", "admin"]
    )

    printed = _printed(capsys.readouterr().out)
    assert token_issuer.validate(printed["Access token"]).role == "admin"


def test_generate_token_requires_user_id() -> None:
    with pytest.raises(SystemExit):
        generate_token.main(["--email", "ops@example.com"])


def test_serve_runs_uvicorn() -> None:
    with patch("todo_api.scripts.serve.uvicorn.run") as mock_run:
        serve.main()

    mock_run.assert_called_once_with(
        "todo_api.main:app",
        host=settings.server_host,
        port=settings.server_port,
        log_config=None,
        reload=settings.debug,
    )
