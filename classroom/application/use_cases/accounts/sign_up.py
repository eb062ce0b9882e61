# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable

from classroom.application.interfaces import UnitOfWork
from classroom.domain.accounts.entities import Account
from classroom.domain.accounts.exceptions import UserAlreadyExistsError
from classroom.domain.accounts.repositories import PasswordHasher
from classroom.shared.logging import logger

from .normalization import normalize_email, normalize_username


class SignUpUseCase:
    def __init__(
        self,
        *,
        uow_factory: Callable[[], UnitOfWork],
        password_hasher: PasswordHasher,
    ) -> None:
        self._uow_factory = uow_factory
        self._password_hasher = password_hasher

    def execute(self, username: str, password: str, email: str) -> Account:
        username = normalize_username(username)
        email = normalize_email(email)

        with self._uow_factory() as uow:
            if uow.accounts.exists_with(username, email):
                raise UserAlreadyExistsError()

        hashed = self._password_hasher.hash(password)

        # The unique constraints settle a concurrent signup with the same identifiers.
        with self._uow_factory() as uow:
            account = uow.accounts.add(username, email, hashed)

        logger.info(f"accounts.signup: created account_id={account.id}")
        return account
