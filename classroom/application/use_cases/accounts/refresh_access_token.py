# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta

from classroom.application.interfaces import UnitOfWork
from classroom.application.services.tokens import TokenIssuer
from classroom.domain.accounts.entities import TokenPair
from classroom.domain.accounts.exceptions import InvalidCredentialsError
from classroom.domain.accounts.repositories import PasswordHasher
from classroom.shared.logging import logger
from classroom.shared.utils.clock import Clock, utcnow

from .sessions import match_session


class RefreshAccessTokenUseCase:
    """Exchange a refresh secret for a new access token and a new secret.

    The presented secret is single-use: its session row is rewritten with
    the new hash in one conditional UPDATE, so of two concurrent refreshes
    with the same secret only one succeeds.
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

    def execute(self, refresh_secret: str, account_id: int) -> TokenPair:
        now = self._clock()
        with self._uow_factory() as uow:
            sessions = uow.sessions.list_for_account(account_id, now)

        session = match_session(sessions, refresh_secret, self._password_hasher, now)

        new_secret = self._token_issuer.issue_refresh_secret()
        new_hash = self._password_hasher.hash(new_secret)
        expires_at = now + self._refresh_ttl

        with self._uow_factory() as uow:
            rotated = uow.sessions.rotate(
                session.id, session.hashed_secret, new_hash, expires_at
            )
            account = uow.accounts.find_by_id(account_id) if rotated else None

        if not rotated:
            logger.warning(f"accounts.refresh: lost rotation race session_id={session.id}")
            raise InvalidCredentialsError()
        if account is None:
            raise InvalidCredentialsError()

        access_token = self._token_issuer.issue_access_token(account.id, account.username)
        return TokenPair(
            account_id=account.id,
            access_token=access_token,
            refresh_token=new_secret,
            refresh_expires_at=expires_at,
        )
