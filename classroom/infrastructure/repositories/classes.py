# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classroom.domain.classes.entities import ClassMember as DomainClassMember
from classroom.domain.classes.entities import ClassRole, Classroom
from classroom.domain.classes.entities import JoinCode as DomainJoinCode
from classroom.domain.classes.exceptions import (
    ClassNotFoundError,
    JoinCodeCollisionError,
    MembershipExistsError,
)
from classroom.domain.classes.repositories import (
    ClassRepository,
    JoinCodeRepository,
    MembershipRepository,
)
from classroom.infrastructure.db.models import Class, ClassMember, JoinCode

from .mappers import to_classroom, to_join_code, to_member


class SqlAlchemyClassRepository(ClassRepository):
    def __init__(self, session: Session):
        self._session = session

    def add(self, name: str, description: str, creator_id: int) -> Classroom:
        row = Class(name=name, description=description, creator_id=creator_id)
        self._session.add(row)
        self._session.flush()
        return to_classroom(row)

    def get(self, class_id: int, *, for_update: bool = False) -> Classroom | None:
        row = self._row(class_id, for_update=for_update)
        return to_classroom(row) if row else None

    def update(self, class_id: int, name: str, description: str) -> Classroom:
        row = self._row(class_id, for_update=True)
        if row is None:
            raise ClassNotFoundError()
        row.name = name
        row.description = description
        self._session.flush()
        return to_classroom(row)

    def delete(self, class_id: int) -> None:
        self._session.execute(delete(Class).where(Class.id == class_id))

    def _row(self, class_id: int, *, for_update: bool) -> Class | None:
        stmt = select(Class).where(Class.id == class_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self._session.scalars(stmt).first()


class SqlAlchemyMembershipRepository(MembershipRepository):
    def __init__(self, session: Session):
        self._session = session

    def add(self, class_id: int, account_id: int, role: ClassRole) -> DomainClassMember:
        row = ClassMember(class_id=class_id, account_id=account_id, role=role.value)
        self._session.add(row)
        try:
            self._session.flush()
        except IntegrityError as exc:
            raise MembershipExistsError() from exc
        return to_member(row)

    def get(self, class_id: int, account_id: int) -> DomainClassMember | None:
        row = self._session.scalars(
            select(ClassMember).where(
                ClassMember.class_id == class_id,
                ClassMember.account_id == account_id,
            )
        ).first()
        return to_member(row) if row else None


class SqlAlchemyJoinCodeRepository(JoinCodeRepository):
    def __init__(self, session: Session):
        self._session = session

    def replace_for_class(
        self, class_id: int, code: str, expires_at: datetime
    ) -> DomainJoinCode:
        self._session.execute(delete(JoinCode).where(JoinCode.class_id == class_id))
        row = JoinCode(class_id=class_id, code=code, expires_at=expires_at)
        self._session.add(row)
        try:
            self._session.flush()
        except IntegrityError as exc:
            raise JoinCodeCollisionError() from exc
        return to_join_code(row)

    def find_by_code(self, code: str) -> DomainJoinCode | None:
        row = self._session.scalars(select(JoinCode).where(JoinCode.code == code)).first()
        return to_join_code(row) if row else None
