from __future__ import annotations

import copy
import os
import tempfile
from dataclasses import replace
from datetime import UTC, datetime, timedelta

# Configuration is read once at import time; point it at a throwaway database.
_TMP_DIR = tempfile.mkdtemp(prefix="classroom-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_TMP_DIR, 'app.db')}")
os.environ.setdefault("JWT_SECRET", "test-secret-value-that-is-long-enough-1234")
os.environ.setdefault("LOG_FILE", os.path.join(_TMP_DIR, "classroom.log"))
os.environ.setdefault("PASSWORD_HASH_METHOD", "pbkdf2:sha256:1000")

import pytest  # noqa: E402

from classroom.application.services.tokens import TokenIssuer  # noqa: E402
from classroom.domain.accounts.entities import Account, RefreshSession  # noqa: E402
from classroom.domain.accounts.exceptions import (  # noqa: E402
    AccountNotFoundError,
    UserAlreadyExistsError,
)
from classroom.domain.accounts.repositories import PasswordHasher  # noqa: E402
from classroom.domain.classes.entities import (  # noqa: E402
    ClassMember,
    ClassRole,
    Classroom,
    JoinCode,
)
from classroom.domain.classes.exceptions import (  # noqa: E402
    ClassNotFoundError,
    JoinCodeCollisionError,
    MembershipExistsError,
)


class InMemoryStore:
    def __init__(self) -> None:
        self.accounts: dict[int, Account] = {}
        self.sessions: dict[int, RefreshSession] = {}
        self.classes: dict[int, Classroom] = {}
        self.members: dict[tuple[int, int], ClassMember] = {}
        self.join_codes: dict[int, JoinCode] = {}
        self.seq = 0

    def next_id(self) -> int:
        self.seq += 1
        return self.seq


class InMemoryAccountRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def find_by_id(self, account_id: int) -> Account | None:
        return self._store.accounts.get(account_id)

    def find_by_username(self, username: str) -> Account | None:
        return next((a for a in self._store.accounts.values() if a.username == username), None)

    def find_by_email(self, email: str) -> Account | None:
        return next((a for a in self._store.accounts.values() if a.email == email), None)

    def exists_with(self, username: str, email: str) -> bool:
        return self.find_by_username(username) is not None or self.find_by_email(email) is not None

    def add(self, username: str, email: str, password_hash: str) -> Account:
        if self.exists_with(username, email):
            raise UserAlreadyExistsError()
        account = Account(
            id=self._store.next_id(),
            username=username,
            email=email,
            password_hash=password_hash,
            created_at=datetime.now(UTC),
        )
        self._store.accounts[account.id] = account
        return account

    def update_profile(self, account_id: int, username: str, email: str) -> Account:
        current = self._store.accounts.get(account_id)
        if current is None:
            raise AccountNotFoundError()
        for other in self._store.accounts.values():
            if other.id != account_id and (other.username == username or other.email == email):
                raise UserAlreadyExistsError()
        updated = replace(current, username=username, email=email)
        self._store.accounts[account_id] = updated
        return updated

    def update_password(self, account_id: int, password_hash: str) -> None:
        current = self._store.accounts.get(account_id)
        if current is None:
            raise AccountNotFoundError()
        self._store.accounts[account_id] = replace(current, password_hash=password_hash)

    def delete(self, account_id: int) -> bool:
        if self._store.accounts.pop(account_id, None) is None:
            return False
        for sid, session in list(self._store.sessions.items()):
            if session.account_id == account_id:
                del self._store.sessions[sid]
        for key in [k for k in self._store.members if k[1] == account_id]:
            del self._store.members[key]
        for cid, classroom in list(self._store.classes.items()):
            if classroom.creator_id == account_id:
                self._store.classes[cid] = replace(classroom, creator_id=None)
        return True


class InMemorySessionStore:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def add(self, account_id: int, hashed_secret: str, expires_at: datetime) -> RefreshSession:
        session = RefreshSession(
            id=self._store.next_id(),
            account_id=account_id,
            hashed_secret=hashed_secret,
            expires_at=expires_at,
        )
        self._store.sessions[session.id] = session
        return session

    def list_for_account(self, account_id: int, now: datetime) -> list[RefreshSession]:
        return [
            s
            for s in self._store.sessions.values()
            if s.account_id == account_id and s.expires_at > now
        ]

    def rotate(
        self, session_id: int, expected_hash: str, new_hash: str, new_expires_at: datetime
    ) -> bool:
        current = self._store.sessions.get(session_id)
        if current is None or current.hashed_secret != expected_hash:
            return False
        self._store.sessions[session_id] = replace(
            current, hashed_secret=new_hash, expires_at=new_expires_at
        )
        return True

    def revoke(self, session_id: int) -> None:
        self._store.sessions.pop(session_id, None)

    def revoke_all(self, account_id: int) -> int:
        return self._drop(lambda s: s.account_id == account_id)

    def purge_expired(self, account_id: int, now: datetime) -> int:
        return self._drop(lambda s: s.account_id == account_id and s.expires_at <= now)

    def _drop(self, predicate) -> int:
        doomed = [sid for sid, s in self._store.sessions.items() if predicate(s)]
        for sid in doomed:
            del self._store.sessions[sid]
        return len(doomed)


class InMemoryClassRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def add(self, name: str, description: str, creator_id: int) -> Classroom:
        classroom = Classroom(
            id=self._store.next_id(),
            name=name,
            description=description,
            creator_id=creator_id,
            created_at=datetime.now(UTC),
        )
        self._store.classes[classroom.id] = classroom
        return classroom

    def get(self, class_id: int, *, for_update: bool = False) -> Classroom | None:
        return self._store.classes.get(class_id)

    def update(self, class_id: int, name: str, description: str) -> Classroom:
        current = self._store.classes.get(class_id)
        if current is None:
            raise ClassNotFoundError()
        updated = replace(current, name=name, description=description)
        self._store.classes[class_id] = updated
        return updated

    def delete(self, class_id: int) -> None:
        self._store.classes.pop(class_id, None)
        self._store.join_codes.pop(class_id, None)
        for key in [k for k in self._store.members if k[0] == class_id]:
            del self._store.members[key]


class InMemoryMembershipRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def add(self, class_id: int, account_id: int, role: ClassRole) -> ClassMember:
        if (class_id, account_id) in self._store.members:
            raise MembershipExistsError()
        member = ClassMember(class_id=class_id, account_id=account_id, role=role)
        self._store.members[(class_id, account_id)] = member
        return member

    def get(self, class_id: int, account_id: int) -> ClassMember | None:
        return self._store.members.get((class_id, account_id))


class InMemoryJoinCodeRepository:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def replace_for_class(self, class_id: int, code: str, expires_at: datetime) -> JoinCode:
        if any(
            jc.code == code and jc.class_id != class_id
            for jc in self._store.join_codes.values()
        ):
            raise JoinCodeCollisionError()
        join_code = JoinCode(
            id=self._store.next_id(), class_id=class_id, code=code, expires_at=expires_at
        )
        self._store.join_codes[class_id] = join_code
        return join_code

    def find_by_code(self, code: str) -> JoinCode | None:
        return next((jc for jc in self._store.join_codes.values() if jc.code == code), None)


class InMemoryUnitOfWork:
    """Snapshot-and-restore stand-in for the SQLAlchemy unit of work."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self._snapshot: dict | None = None
        self.accounts = InMemoryAccountRepository(store)
        self.sessions = InMemorySessionStore(store)
        self.classes = InMemoryClassRepository(store)
        self.members = InMemoryMembershipRepository(store)
        self.join_codes = InMemoryJoinCodeRepository(store)

    def __enter__(self) -> InMemoryUnitOfWork:
        self._snapshot = copy.deepcopy(self._store.__dict__)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc is not None and self._snapshot is not None:
            self._store.__dict__.update(self._snapshot)
        self._snapshot = None


class DeterministicHasher(PasswordHasher):
    def hash(self, password: str) -> str:
        return f"hashed:{password}"

    def verify(self, password: str, hashed: str) -> bool:
        return hashed == f"hashed:{password}"


class FrozenClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest.fixture()
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture()
def uow_factory(store: InMemoryStore):
    return lambda: InMemoryUnitOfWork(store)


@pytest.fixture()
def hasher() -> DeterministicHasher:
    return DeterministicHasher()


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture()
def token_issuer() -> TokenIssuer:
    return TokenIssuer(secret="unit-test-secret", algorithm="HS256")
