# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .entities import ClassMember, ClassRole, Classroom, JoinCode


class ClassRepository(Protocol):
    def add(self, name: str, description: str, creator_id: int) -> Classroom: ...
    def get(self, class_id: int, *, for_update: bool = False) -> Classroom | None: ...
    def update(self, class_id: int, name: str, description: str) -> Classroom: ...
    def delete(self, class_id: int) -> None: ...


class MembershipRepository(Protocol):
    def add(self, class_id: int, account_id: int, role: ClassRole) -> ClassMember: ...
    def get(self, class_id: int, account_id: int) -> ClassMember | None: ...


class JoinCodeRepository(Protocol):
    def replace_for_class(
        self, class_id: int, code: str, expires_at: datetime
    ) -> JoinCode: ...

    def find_by_code(self, code: str) -> JoinCode | None: ...
