# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Request authentication for the HTTP layer.

A request moves from *no token* to *extracted token* to either a verified
:class:`Identity` or a rejection. Views receive the identity explicitly as
the ``identity`` keyword argument; ``g.account_id`` is only set for request
logging.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps
from typing import Any

from flask import g, request

from classroom.application.services.tokens import TokenIssuer
from classroom.domain.accounts.exceptions import AuthenticationRequiredError
from classroom.shared.logging import logger


@dataclass(slots=True, frozen=True)
class Identity:

    account_id: int
    username: str


def extract_bearer_token(header: str | None) -> str | None:
    if not header:
        return None
    scheme, _, value = header.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    value = value.strip()
    return value or None


def client_ip() -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.remote_addr or "unknown"


class Authenticator:
    def __init__(self, *, token_issuer: TokenIssuer, debug_mode: bool = False) -> None:
        self._token_issuer = token_issuer
        self._debug_mode = debug_mode

    def authenticate(self, header: str | None) -> Identity:
        token = extract_bearer_token(header)
        if token is None:
            raise AuthenticationRequiredError()

        claims = self._token_issuer.verify_access_token(token)
        return Identity(account_id=claims.account_id, username=claims.username)

    def required(self, view: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(view)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                identity = self.authenticate(request.headers.get("Authorization"))
            except AuthenticationRequiredError:
                if self._debug_mode:
                    logger.debug(f"auth: no bearer token on {request.method} {request.path}")
                raise
            g.account_id = identity.account_id
            return view(*args, identity=identity, **kwargs)

        return wrapper


__all__ = ["Authenticator", "Identity", "client_ip", "extract_bearer_token"]
