# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .entities import Account, RefreshSession


class AccountRepository(Protocol):
    def find_by_id(self, account_id: int) -> Account | None: ...
    def find_by_username(self, username: str) -> Account | None: ...
    def find_by_email(self, email: str) -> Account | None: ...
    def exists_with(self, username: str, email: str) -> bool: ...
    def add(self, username: str, email: str, password_hash: str) -> Account: ...
    def update_profile(self, account_id: int, username: str, email: str) -> Account: ...
    def update_password(self, account_id: int, password_hash: str) -> None: ...
    def delete(self, account_id: int) -> bool: ...


class SessionStore(Protocol):
    def add(
        self, account_id: int, hashed_secret: str, expires_at: datetime
    ) -> RefreshSession: ...

    def list_for_account(self, account_id: int, now: datetime) -> list[RefreshSession]: ...

    def rotate(
        self,
        session_id: int,
        expected_hash: str,
        new_hash: str,
        new_expires_at: datetime,
    ) -> bool: ...

    def revoke(self, session_id: int) -> None: ...

    def revoke_all(self, account_id: int) -> int: ...

    def purge_expired(self, account_id: int, now: datetime) -> int: ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, hashed: str) -> bool: ...
