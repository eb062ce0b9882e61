# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import secrets
from collections.abc import Callable
from datetime import timedelta
from functools import cached_property

from classroom.application.interfaces import UnitOfWork
from classroom.application.services.tokens import TokenIssuer
from classroom.domain.accounts.entities import TokenPair
from classroom.domain.accounts.exceptions import InvalidCredentialsError
from classroom.domain.accounts.repositories import PasswordHasher
from classroom.shared.logging import logger
from classroom.shared.utils.clock import Clock, utcnow

from .normalization import normalize_email, normalize_username


class SignInUseCase:
    """Check credentials and open a refresh session.

    Unknown identifiers still pay for one password check against a
    placeholder hash, so both failure paths take the same time.
    """

    def __init__(
        self,
        *,
        uow_factory: Callable[[], UnitOfWork],
        password_hasher: PasswordHasher,
        token_issuer: TokenIssuer,
        refresh_ttl: timedelta,
        clock: Clock = utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._password_hasher = password_hasher
        self._token_issuer = token_issuer
        self._refresh_ttl = refresh_ttl
        self._clock = clock

    @cached_property
    def _placeholder_hash(self) -> str:
        return self._password_hasher.hash(secrets.token_urlsafe(16))

    def execute(
        self,
        password: str,
        username: str | None = None,
        email: str | None = None,
    ) -> TokenPair:
        with self._uow_factory() as uow:
            if username:
                account = uow.accounts.find_by_username(normalize_username(username))
            elif email:
                account = uow.accounts.find_by_email(normalize_email(email))
            else:
                account = None

        if account is None:
            self._password_hasher.verify(password, self._placeholder_hash)
            raise InvalidCredentialsError()
        if not self._password_hasher.verify(password, account.password_hash):
            raise InvalidCredentialsError()

        access_token = self._token_issuer.issue_access_token(account.id, account.username)
        refresh_secret = self._token_issuer.issue_refresh_secret()
        hashed_secret = self._password_hasher.hash(refresh_secret)
        now = self._clock()
        expires_at = now + self._refresh_ttl

        with self._uow_factory() as uow:
            purged = uow.sessions.purge_expired(account.id, now)
            uow.sessions.add(account.id, hashed_secret, expires_at)

        if purged:
            logger.debug(f"accounts.signin: purged {purged} expired sessions account={account.id}")
        return TokenPair(
            account_id=account.id,
            access_token=access_token,
            refresh_token=refresh_secret,
            refresh_expires_at=expires_at,
        )
