# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable

from classroom.application.interfaces import UnitOfWork
from classroom.domain.accounts.entities import Account
from classroom.domain.accounts.exceptions import AccountNotFoundError, UserAlreadyExistsError

from .normalization import normalize_email, normalize_username


class ReadAccountUseCase:
    def __init__(self, *, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, account_id: int) -> Account:
        with self._uow_factory() as uow:
            account = uow.accounts.find_by_id(account_id)
        if account is None:
            raise AccountNotFoundError()
        return account


class UpdateAccountUseCase:
    def __init__(self, *, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, account_id: int, username: str, email: str) -> Account:
        username = normalize_username(username)
        email = normalize_email(email)

        with self._uow_factory() as uow:
            if uow.accounts.find_by_id(account_id) is None:
                raise AccountNotFoundError()
            for other in (
                uow.accounts.find_by_username(username),
                uow.accounts.find_by_email(email),
            ):
                if other is not None and other.id != account_id:
                    raise UserAlreadyExistsError()
            return uow.accounts.update_profile(account_id, username, email)


class DeleteAccountUseCase:
    def __init__(self, *, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, account_id: int) -> None:
        with self._uow_factory() as uow:
            if not uow.accounts.delete(account_id):
                raise AccountNotFoundError()
