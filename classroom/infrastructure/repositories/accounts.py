# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classroom.domain.accounts.entities import Account as DomainAccount
from classroom.domain.accounts.entities import RefreshSession
from classroom.domain.accounts.exceptions import AccountNotFoundError, UserAlreadyExistsError
from classroom.domain.accounts.repositories import AccountRepository, SessionStore
from classroom.infrastructure.db.models import Account, RefreshToken

from .mappers import to_account, to_session


class SqlAlchemyAccountRepository(AccountRepository):
    def __init__(self, session: Session):
        self._session = session

    def find_by_id(self, account_id: int) -> DomainAccount | None:
        row = self._session.get(Account, account_id)
        return to_account(row) if row else None

    def find_by_username(self, username: str) -> DomainAccount | None:
        row = self._session.scalars(
            select(Account).where(Account.username == username)
        ).first()
        return to_account(row) if row else None

    def find_by_email(self, email: str) -> DomainAccount | None:
        row = self._session.scalars(select(Account).where(Account.email == email)).first()
        return to_account(row) if row else None

    def exists_with(self, username: str, email: str) -> bool:
        found = self._session.scalars(
            select(Account.id)
            .where(or_(Account.email == email, Account.username == username))
            .limit(1)
        ).first()
        return found is not None

    def add(self, username: str, email: str, password_hash: str) -> DomainAccount:
        row = Account(username=username, email=email, password_hash=password_hash)
        self._session.add(row)
        self._flush_unique()
        return to_account(row)

    def update_profile(self, account_id: int, username: str, email: str) -> DomainAccount:
        row = self._session.get(Account, account_id)
        if row is None:
            raise AccountNotFoundError()
        row.username = username
        row.email = email
        self._flush_unique()
        return to_account(row)

    def update_password(self, account_id: int, password_hash: str) -> None:
        result = self._session.execute(
            update(Account)
            .where(Account.id == account_id)
            .values(password_hash=password_hash)
        )
        if result.rowcount == 0:
            raise AccountNotFoundError()

    def delete(self, account_id: int) -> bool:
        result = self._session.execute(delete(Account).where(Account.id == account_id))
        return result.rowcount > 0

    def _flush_unique(self) -> None:
        try:
            self._session.flush()
        except IntegrityError as exc:
            raise UserAlreadyExistsError() from exc


class SqlAlchemySessionStore(SessionStore):
    def __init__(self, session: Session):
        self._session = session

    def add(self, account_id: int, hashed_secret: str, expires_at: datetime) -> RefreshSession:
        row = RefreshToken(
            account_id=account_id, hashed_secret=hashed_secret, expires_at=expires_at
        )
        self._session.add(row)
        self._session.flush()
        return to_session(row)

    def list_for_account(self, account_id: int, now: datetime) -> list[RefreshSession]:
        rows = self._session.scalars(
            select(RefreshToken)
            .where(RefreshToken.account_id == account_id, RefreshToken.expires_at > now)
            .order_by(RefreshToken.id.asc())
        ).all()
        return [to_session(row) for row in rows]

    def rotate(
        self,
        session_id: int,
        expected_hash: str,
        new_hash: str,
        new_expires_at: datetime,
    ) -> bool:
        result = self._session.execute(
            update(RefreshToken)
            .where(
                RefreshToken.id == session_id,
                RefreshToken.hashed_secret == expected_hash,
            )
            .values(hashed_secret=new_hash, expires_at=new_expires_at)
        )
        return result.rowcount == 1

    def revoke(self, session_id: int) -> None:
        self._session.execute(delete(RefreshToken).where(RefreshToken.id == session_id))

    def revoke_all(self, account_id: int) -> int:
        result = self._session.execute(
            delete(RefreshToken).where(RefreshToken.account_id == account_id)
        )
        return result.rowcount

    def purge_expired(self, account_id: int, now: datetime) -> int:
        result = self._session.execute(
            delete(RefreshToken).where(
                RefreshToken.account_id == account_id,
                RefreshToken.expires_at <= now,
            )
        )
        return result.rowcount
