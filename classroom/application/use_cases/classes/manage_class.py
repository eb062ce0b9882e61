# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Create, read, update and delete classes.

Every mutation loads the class row ``FOR UPDATE`` and checks the caller's
role inside the same unit of work as the write.
"""

from __future__ import annotations

from collections.abc import Callable

from classroom.application.interfaces import UnitOfWork
from classroom.domain.accounts.exceptions import AccountNotFoundError
from classroom.domain.classes.entities import (
    DEFAULT_CLASS_NAME,
    ClassDetails,
    ClassRole,
    Classroom,
)
from classroom.shared.logging import logger

from .access import load_class, require_admin, require_member


def _class_name(raw: str | None) -> str:
    name = (raw or "").strip()
    return name or DEFAULT_CLASS_NAME


class CreateClassUseCase:
    def __init__(self, *, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, name: str | None, description: str | None, creator_id: int) -> Classroom:
        with self._uow_factory() as uow:
            if uow.accounts.find_by_id(creator_id) is None:
                raise AccountNotFoundError()
            classroom = uow.classes.add(
                _class_name(name), (description or "").strip(), creator_id
            )
            uow.members.add(classroom.id, creator_id, ClassRole.ADMIN)

        logger.info(f"classes.create: class_id={classroom.id} creator={creator_id}")
        return classroom


class ReadClassUseCase:
    def __init__(self, *, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, class_id: int, caller_id: int) -> ClassDetails:
        with self._uow_factory() as uow:
            classroom = load_class(uow, class_id)
            require_member(uow, class_id, caller_id)
            creator = (
                uow.accounts.find_by_id(classroom.creator_id)
                if classroom.creator_id is not None
                else None
            )

        return ClassDetails(
            id=classroom.id,
            name=classroom.name,
            description=classroom.description,
            created_at=classroom.created_at,
            created_by=creator.username if creator else None,
        )


class UpdateClassUseCase:
    def __init__(self, *, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(
        self,
        class_id: int,
        caller_id: int,
        name: str | None = None,
        description: str | None = None,
    ) -> Classroom:
        with self._uow_factory() as uow:
            current = load_class(uow, class_id, for_update=True)
            require_admin(uow, class_id, caller_id)
            return uow.classes.update(
                class_id,
                _class_name(name) if name is not None else current.name,
                description.strip() if description is not None else current.description,
            )


class DeleteClassUseCase:
    def __init__(self, *, uow_factory: Callable[[], UnitOfWork]) -> None:
        self._uow_factory = uow_factory

    def execute(self, class_id: int, caller_id: int) -> None:
        with self._uow_factory() as uow:
            load_class(uow, class_id, for_update=True)
            require_admin(uow, class_id, caller_id)
            uow.classes.delete(class_id)

        logger.info(f"classes.delete: class_id={class_id} by={caller_id}")
