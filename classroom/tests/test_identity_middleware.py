from __future__ import annotations

from datetime import timedelta

import pytest
from flask import Flask, g, jsonify

from classroom.application.services.tokens import TokenIssuer
from classroom.domain.accounts.exceptions import AuthenticationRequiredError, InvalidTokenError
from classroom.interfaces.http.auth import Authenticator, Identity, extract_bearer_token
from classroom.shared.middleware.error_handler import configure_error_handling


@pytest.mark.parametrize(
    ("header", "expected"),
    [
        (None, None),
        ("", None),
        ("Bearer", None),
        ("Bearer   ", None),
        ("Basic dXNlcjpwdw==", None),
        ("Bearer abc.def.ghi", "abc.def.ghi"),
        ("bearer abc.def.ghi", "abc.def.ghi"),
        ("  Bearer   abc.def.ghi  ", "abc.def.ghi"),
    ],
)
def test_extract_bearer_token(header: str | None, expected: str | None) -> None:
    assert extract_bearer_token(header) == expected


def test_authenticate_returns_identity(token_issuer: TokenIssuer) -> None:
    authenticator = Authenticator(token_issuer=token_issuer)
    token = token_issuer.issue_access_token(3, "carol")

    assert authenticator.authenticate(f"Bearer {token}") == Identity(account_id=3, username="carol")


def test_authenticate_without_token(token_issuer: TokenIssuer) -> None:
    with pytest.raises(AuthenticationRequiredError):
        Authenticator(token_issuer=token_issuer).authenticate(None)


def test_authenticate_with_expired_token() -> None:
    issuer = TokenIssuer(secret="unit-test-secret", access_ttl=timedelta(seconds=-5))
    token = issuer.issue_access_token(3, "carol")

    with pytest.raises(InvalidTokenError):
        Authenticator(token_issuer=issuer).authenticate(f"Bearer {token}")


@pytest.fixture()
def protected_app(token_issuer: TokenIssuer) -> Flask:
    app = Flask(__name__)
    configure_error_handling(app)
    authenticator = Authenticator(token_issuer=token_issuer)

    @authenticator.required
    def whoami(*, identity: Identity):
        return jsonify(
            account_id=identity.account_id,
            username=identity.username,
            logged_as=g.account_id,
        )

    app.add_url_rule("/whoami", view_func=whoami)
    return app


def test_required_passes_identity_to_view(protected_app: Flask, token_issuer: TokenIssuer) -> None:
    token = token_issuer.issue_access_token(3, "carol")

    with protected_app.test_client() as client:
        response = client.get("/whoami", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.get_json() == {"account_id": 3, "username": "carol", "logged_as": 3}


def test_required_without_header_returns_401(protected_app: Flask) -> None:
    with protected_app.test_client() as client:
        response = client.get("/whoami")

    assert response.status_code == 401
    assert response.get_json() == {"error": "authentication_required"}


def test_required_with_bad_token_returns_401(protected_app: Flask) -> None:
    with protected_app.test_client() as client:
        response = client.get("/whoami", headers={"Authorization": "Bearer not.a.token"})

    assert response.status_code == 401
    assert response.get_json() == {"error": "invalid_token"}
