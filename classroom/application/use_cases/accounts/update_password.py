# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable

from classroom.application.interfaces import UnitOfWork
from classroom.domain.accounts.exceptions import InvalidCredentialsError
from classroom.domain.accounts.repositories import PasswordHasher


class UpdatePasswordUseCase:
    def __init__(
        self,
        *,
        uow_factory: Callable[[], UnitOfWork],
        password_hasher: PasswordHasher,
    ) -> None:
        self._uow_factory = uow_factory
        self._password_hasher = password_hasher

    def execute(self, account_id: int, old_password: str, new_password: str) -> int:
        """Replace the password and revoke every refresh session of the account.

        Returns the number of sessions revoked.
        """
        with self._uow_factory() as uow:
            account = uow.accounts.find_by_id(account_id)

        if account is None or not self._password_hasher.verify(
            old_password, account.password_hash
        ):
            raise InvalidCredentialsError()

        hashed = self._password_hasher.hash(new_password)

        with self._uow_factory() as uow:
            uow.accounts.update_password(account_id, hashed)
            return uow.sessions.revoke_all(account_id)
