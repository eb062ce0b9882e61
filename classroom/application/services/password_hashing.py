# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from classroom.domain.accounts.repositories import PasswordHasher
from classroom.shared.errors import HashingError


class WerkzeugPasswordHasher(PasswordHasher):
    """Salted one-way password hashing backed by ``werkzeug.security``."""

    def __init__(self, method: str = "scrypt") -> None:
        self._method = method

    def hash(self, password: str) -> str:
        try:
            return generate_password_hash(password, method=self._method)
        except (ValueError, TypeError) as exc:
            raise HashingError() from exc

    def verify(self, password: str, hashed: str) -> bool:
        if not hashed:
            return False
        try:
            return check_password_hash(hashed, password)
        except (ValueError, TypeError):
            return False
