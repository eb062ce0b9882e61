# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Protocol

from classroom.domain.accounts.repositories import AccountRepository, SessionStore
from classroom.domain.classes.repositories import (
    ClassRepository,
    JoinCodeRepository,
    MembershipRepository,
)


class UnitOfWork(Protocol):
    """Transactional boundary exposing the repositories of one session."""

    accounts: AccountRepository
    sessions: SessionStore
    classes: ClassRepository
    members: MembershipRepository
    join_codes: JoinCodeRepository

    def __enter__(self) -> UnitOfWork: ...

    def __exit__(self, exc_type, exc, tb) -> None: ...
