"""Use-case for revoking a refresh session."""

from __future__ import annotations

from collections.abc import Callable

from classroom.application.interfaces import UnitOfWork
from classroom.domain.accounts.repositories import PasswordHasher
from classroom.shared.utils.clock import Clock, utcnow

from .sessions import find_session


class SignOutUseCase:
    def __init__(
        self,
        *,
        uow_factory: Callable[[], UnitOfWork],
        password_hasher: PasswordHasher,
        clock: Clock = utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._password_hasher = password_hasher
        self._clock = clock

    def execute(self, refresh_secret: str, account_id: int) -> bool:
        if not refresh_secret:
            return False

        with self._uow_factory() as uow:
            sessions = uow.sessions.list_for_account(account_id, self._clock())

        session = find_session(sessions, refresh_secret, self._password_hasher)
        if session is None:
            return False

        with self._uow_factory() as uow:
            uow.sessions.revoke(session.id)
        return True
