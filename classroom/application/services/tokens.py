# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Access-token signing and verification.

Access tokens are compact JWS values carrying ``user_id``, ``username``,
``iat`` and ``exp``. Refresh secrets are opaque random strings; only their
hashes are persisted.
"""

from __future__ import annotations

import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt
from jose.exceptions import JOSEError

from classroom.domain.accounts.entities import AccessClaims
from classroom.domain.accounts.exceptions import InvalidTokenError
from classroom.shared.errors import TokenGenerationError
from classroom.shared.utils.clock import Clock, utcnow

REFRESH_SECRET_BYTES = 32


def _int_claim(claims: dict[str, Any], name: str) -> int:
    value = claims.get(name)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidTokenError(context={"claim": name})
    return value


class TokenIssuer:
    def __init__(
        self,
        *,
        secret: str,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(minutes=15),
        clock: Clock = utcnow,
    ) -> None:
        if not secret:
            raise ValueError("token secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self._access_ttl = access_ttl
        self._clock = clock

    def issue_access_token(self, account_id: int, username: str) -> str:
        issued_at = self._clock()
        claims = {
            "user_id": account_id,
            "username": username,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self._access_ttl).timestamp()),
        }
        try:
            return jwt.encode(claims, self._secret, algorithm=self._algorithm)
        except JOSEError as exc:
            raise TokenGenerationError() from exc

    def verify_access_token(self, token: str) -> AccessClaims:
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as exc:
            raise InvalidTokenError() from exc

        account_id = _int_claim(claims, "user_id")
        username = claims.get("username")
        if not isinstance(username, str) or not username:
            raise InvalidTokenError(context={"claim": "username"})
        issued_at = _int_claim(claims, "iat")
        expires_at = _int_claim(claims, "exp")

        return AccessClaims(
            account_id=account_id,
            username=username,
            issued_at=datetime.fromtimestamp(issued_at, UTC),
            expires_at=datetime.fromtimestamp(expires_at, UTC),
        )

    def issue_refresh_secret(self) -> str:
        return secrets.token_urlsafe(REFRESH_SECRET_BYTES)

    def unsafe_extract_account_id(self, token: str) -> int:
        """Read ``user_id`` without checking the signature or expiry.

        Only good for picking which sessions to compare a refresh secret
        against; never treat the result as an authenticated identity.
        """
        try:
            claims = jwt.get_unverified_claims(token)
        except JWTError as exc:
            raise InvalidTokenError() from exc
        return _int_claim(claims, "user_id")
