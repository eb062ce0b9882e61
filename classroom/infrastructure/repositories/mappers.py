# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Row-to-entity conversion shared by the SQLAlchemy repositories."""

from __future__ import annotations

from datetime import UTC, datetime

from classroom.domain.accounts.entities import Account, RefreshSession
from classroom.domain.classes.entities import ClassMember, ClassRole, Classroom, JoinCode
from classroom.infrastructure.db import models


def as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def to_account(row: models.Account) -> Account:
    return Account(
        id=row.id,
        username=row.username,
        email=row.email,
        password_hash=row.password_hash,
        created_at=as_utc(row.created_at),
    )


def to_session(row: models.RefreshToken) -> RefreshSession:
    return RefreshSession(
        id=row.id,
        account_id=row.account_id,
        hashed_secret=row.hashed_secret,
        expires_at=as_utc(row.expires_at),
    )


def to_classroom(row: models.Class) -> Classroom:
    return Classroom(
        id=row.id,
        name=row.name,
        description=row.description or "",
        creator_id=row.creator_id,
        created_at=as_utc(row.created_at),
    )


def to_member(row: models.ClassMember) -> ClassMember:
    return ClassMember(
        class_id=row.class_id,
        account_id=row.account_id,
        role=ClassRole(row.role),
    )


def to_join_code(row: models.JoinCode) -> JoinCode:
    return JoinCode(
        id=row.id,
        class_id=row.class_id,
        code=row.code,
        expires_at=as_utc(row.expires_at),
    )
