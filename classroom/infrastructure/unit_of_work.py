# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Database unit of work implementation."""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractContextManager
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from classroom.application.interfaces import UnitOfWork
from classroom.infrastructure.repositories.accounts import (
    SqlAlchemyAccountRepository,
    SqlAlchemySessionStore,
)
from classroom.infrastructure.repositories.classes import (
    SqlAlchemyClassRepository,
    SqlAlchemyJoinCodeRepository,
    SqlAlchemyMembershipRepository,
)
from classroom.shared.errors import PersistenceError
from classroom.shared.logging import logger


@dataclass(slots=True)
class SqlAlchemyUnitOfWork(AbstractContextManager, UnitOfWork):
    """SQLAlchemy-backed unit of work.

    Repositories are bound to the session opened on ``__enter__``; the
    transaction commits on a clean exit and rolls back otherwise. Driver
    errors leave as :class:`PersistenceError`.
    """

    session_factory: Callable[[], Session]
    _session: Session | None = field(default=None, init=False)

    accounts: SqlAlchemyAccountRepository = field(init=False)
    sessions: SqlAlchemySessionStore = field(init=False)
    classes: SqlAlchemyClassRepository = field(init=False)
    members: SqlAlchemyMembershipRepository = field(init=False)
    join_codes: SqlAlchemyJoinCodeRepository = field(init=False)

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        session = self.session_factory()
        self._session = session
        self.accounts = SqlAlchemyAccountRepository(session)
        self.sessions = SqlAlchemySessionStore(session)
        self.classes = SqlAlchemyClassRepository(session)
        self.members = SqlAlchemyMembershipRepository(session)
        self.join_codes = SqlAlchemyJoinCodeRepository(session)
        logger.debug("uow: session opened")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        assert self._session is not None
        try:
            if exc:
                logger.debug(f"uow: rollback due to {exc_type.__name__}")
                self._session.rollback()
            else:
                self._session.commit()
                logger.debug("uow: committed")
        except SQLAlchemyError as commit_error:
            logger.exception("uow: exception while finalising")
            self._session.rollback()
            raise PersistenceError("commit") from commit_error
        finally:
            self._session.close()
            self._session = None
            logger.debug("uow: session closed")

        if isinstance(exc, SQLAlchemyError):
            raise PersistenceError() from exc

    @property
    def session(self) -> Session:
        if self._session is None:
            msg = "UnitOfWork session accessed before entering context"
            raise RuntimeError(msg)
        return self._session


def sqlalchemy_uow_factory(
    session_factory: Callable[[], Session],
) -> Callable[[], SqlAlchemyUnitOfWork]:
    def _factory() -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(session_factory)

    return _factory
