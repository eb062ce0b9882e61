# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Refresh-session helpers shared by sign-in, refresh and sign-out."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from classroom.domain.accounts.entities import RefreshSession
from classroom.domain.accounts.exceptions import InvalidCredentialsError
from classroom.domain.accounts.repositories import PasswordHasher


def find_session(
    sessions: Iterable[RefreshSession], secret: str, hasher: PasswordHasher
) -> RefreshSession | None:
    if not secret:
        return None
    for session in sessions:
        if hasher.verify(secret, session.hashed_secret):
            return session
    return None


def match_session(
    sessions: Iterable[RefreshSession],
    secret: str,
    hasher: PasswordHasher,
    now: datetime,
) -> RefreshSession:
    """Return the live session whose hash matches ``secret``.

    The first matching hash wins. A missing match and an expired match are
    reported identically.
    """
    session = find_session(sessions, secret, hasher)
    if session is None or session.is_expired(now):
        raise InvalidCredentialsError()
    return session
