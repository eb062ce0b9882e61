# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta

from classroom.application.interfaces import UnitOfWork
from classroom.application.services.join_codes import generate_join_code, normalize_join_code
from classroom.domain.accounts.exceptions import AccountNotFoundError
from classroom.domain.classes.entities import ClassMember, ClassRole, JoinCode
from classroom.domain.classes.exceptions import (
    ClassNotFoundError,
    JoinCodeCollisionError,
    MembershipExistsError,
)
from classroom.shared.logging import logger
from classroom.shared.utils.clock import Clock, utcnow

from .access import load_class, require_admin

JOIN_CODE_ATTEMPTS = 5


class GenerateJoinCodeUseCase:
    """Issue a fresh join code for a class, invalidating the previous one.

    A code already held by another class is redrawn, up to
    ``JOIN_CODE_ATTEMPTS`` times.
    """

    def __init__(
        self,
        *,
        uow_factory: Callable[[], UnitOfWork],
        code_ttl: timedelta,
        code_generator: Callable[[], str] = generate_join_code,
        clock: Clock = utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._code_ttl = code_ttl
        self._code_generator = code_generator
        self._clock = clock

    def execute(self, class_id: int, caller_id: int) -> JoinCode:
        for attempt in range(1, JOIN_CODE_ATTEMPTS + 1):
            code = self._code_generator()
            expires_at = self._clock() + self._code_ttl
            try:
                with self._uow_factory() as uow:
                    load_class(uow, class_id, for_update=True)
                    require_admin(uow, class_id, caller_id)
                    return uow.join_codes.replace_for_class(class_id, code, expires_at)
            except JoinCodeCollisionError:
                logger.warning(
                    f"classes.join_code: code collision class_id={class_id} attempt={attempt}"
                )
        raise JoinCodeCollisionError()


class JoinClassUseCase:
    """Redeem a join code for a regular membership.

    Joining a class the caller already belongs to succeeds and returns the
    existing membership unchanged, so an admin is never demoted.
    """

    def __init__(
        self,
        *,
        uow_factory: Callable[[], UnitOfWork],
        clock: Clock = utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock

    def execute(self, code: str, account_id: int) -> ClassMember:
        normalized = normalize_join_code(code)
        if not normalized:
            raise ClassNotFoundError()

        with self._uow_factory() as uow:
            join_code = uow.join_codes.find_by_code(normalized)
            if join_code is None or join_code.is_expired(self._clock()):
                raise ClassNotFoundError()
            if uow.accounts.find_by_id(account_id) is None:
                raise AccountNotFoundError()
            existing = uow.members.get(join_code.class_id, account_id)

        if existing is not None:
            return existing

        class_id = join_code.class_id
        try:
            with self._uow_factory() as uow:
                member = uow.members.add(class_id, account_id, ClassRole.USER)
        except MembershipExistsError:
            # Lost the insert to a concurrent join, or the class went away.
            logger.info(f"classes.join: concurrent join class_id={class_id} account={account_id}")
            with self._uow_factory() as uow:
                existing = uow.members.get(class_id, account_id)
            if existing is None:
                raise ClassNotFoundError()
            return existing

        logger.info(f"classes.join: account={account_id} joined class_id={class_id}")
        return member
