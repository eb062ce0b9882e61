# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

DEFAULT_CLASS_NAME = "Unnamed Class"


class ClassRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


@dataclass(slots=True, frozen=True)
class Classroom:

    id: int
    name: str
    description: str
    creator_id: int | None
    created_at: datetime


@dataclass(slots=True, frozen=True)
class ClassMember:

    class_id: int
    account_id: int
    role: ClassRole

    @property
    def is_admin(self) -> bool:
        return self.role is ClassRole.ADMIN


@dataclass(slots=True, frozen=True)
class JoinCode:

    id: int
    class_id: int
    code: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


@dataclass(slots=True, frozen=True)
class ClassDetails:
    """Class fields as shown to members, with the creator resolved to a username."""

    id: int
    name: str
    description: str
    created_at: datetime
    created_by: str | None
