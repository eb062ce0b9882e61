# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, frozen=True)
class Account:

    id: int
    username: str
    email: str
    password_hash: str
    created_at: datetime


@dataclass(slots=True, frozen=True)
class RefreshSession:
    """A persisted refresh secret; only the hash is ever stored."""

    id: int
    account_id: int
    hashed_secret: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


@dataclass(slots=True, frozen=True)
class TokenPair:

    account_id: int
    access_token: str
    refresh_token: str
    refresh_expires_at: datetime


@dataclass(slots=True, frozen=True)
class AccessClaims:

    account_id: int
    username: str
    issued_at: datetime
    expires_at: datetime
