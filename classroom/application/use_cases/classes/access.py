# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from classroom.application.interfaces import UnitOfWork
from classroom.domain.classes.entities import ClassMember, Classroom
from classroom.domain.classes.exceptions import ClassAccessDeniedError, ClassNotFoundError


def load_class(uow: UnitOfWork, class_id: int, *, for_update: bool = False) -> Classroom:
    classroom = uow.classes.get(class_id, for_update=for_update)
    if classroom is None:
        raise ClassNotFoundError()
    return classroom


def require_member(uow: UnitOfWork, class_id: int, account_id: int) -> ClassMember:
    member = uow.members.get(class_id, account_id)
    if member is None:
        raise ClassAccessDeniedError()
    return member


def require_admin(uow: UnitOfWork, class_id: int, account_id: int) -> ClassMember:
    member = require_member(uow, class_id, account_id)
    if not member.is_admin:
        raise ClassAccessDeniedError()
    return member
