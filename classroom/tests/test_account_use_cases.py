from __future__ import annotations

from datetime import timedelta

import pytest
from conftest import DeterministicHasher, InMemorySessionStore

from classroom.application.use_cases.accounts.profile import (
    DeleteAccountUseCase,
    ReadAccountUseCase,
    UpdateAccountUseCase,
)
from classroom.application.use_cases.accounts.refresh_access_token import (
    RefreshAccessTokenUseCase,
)
from classroom.application.use_cases.accounts.sign_in import SignInUseCase
from classroom.application.use_cases.accounts.sign_out import SignOutUseCase
from classroom.application.use_cases.accounts.sign_up import SignUpUseCase
from classroom.application.use_cases.accounts.update_password import UpdatePasswordUseCase
from classroom.domain.accounts.exceptions import (
    AccountNotFoundError,
    InvalidCredentialsError,
    UserAlreadyExistsError,
)

REFRESH_TTL = timedelta(days=30)


@pytest.fixture()
def sign_up(uow_factory, hasher) -> SignUpUseCase:
    return SignUpUseCase(uow_factory=uow_factory, password_hasher=hasher)


@pytest.fixture()
def sign_in(uow_factory, hasher, token_issuer, clock) -> SignInUseCase:
    return SignInUseCase(
        uow_factory=uow_factory,
        password_hasher=hasher,
        token_issuer=token_issuer,
        refresh_ttl=REFRESH_TTL,
        clock=clock,
    )


@pytest.fixture()
def refresh(uow_factory, hasher, token_issuer, clock) -> RefreshAccessTokenUseCase:
    return RefreshAccessTokenUseCase(
        uow_factory=uow_factory,
        password_hasher=hasher,
        token_issuer=token_issuer,
        refresh_ttl=REFRESH_TTL,
        clock=clock,
    )


def test_sign_up_normalizes_identifiers(sign_up: SignUpUseCase) -> None:
    account = sign_up.execute("  alice ", "pw1", "  A@X.com ")

    assert account.username == "alice"
    assert account.email == "a@x.com"
    assert account.password_hash == "hashed:pw1"


def test_sign_up_rejects_duplicate_username(sign_up: SignUpUseCase) -> None:
    sign_up.execute("alice", "pw1", "a@x.com")

    with pytest.raises(UserAlreadyExistsError):
        sign_up.execute("alice", "pw2", "b@x.com")


def test_sign_up_rejects_duplicate_email_in_any_case(sign_up: SignUpUseCase, store) -> None:
    sign_up.execute("alice", "pw1", "a@x.com")

    with pytest.raises(UserAlreadyExistsError):
        sign_up.execute("bob", "pw2", " A@X.COM")

    assert len(store.accounts) == 1


def test_sign_in_returns_token_pair_and_persists_hashed_secret(
    sign_up, sign_in, store, token_issuer, clock
) -> None:
    account = sign_up.execute("alice", "pw1", "a@x.com")

    pair = sign_in.execute("pw1", username="alice")

    claims = token_issuer.verify_access_token(pair.access_token)
    assert claims.account_id == account.id
    assert claims.username == "alice"
    assert pair.refresh_expires_at == clock.now + REFRESH_TTL
    [session] = store.sessions.values()
    assert session.hashed_secret == f"hashed:{pair.refresh_token}"


def test_sign_in_by_email(sign_up, sign_in) -> None:
    sign_up.execute("alice", "pw1", "a@x.com")

    pair = sign_in.execute("pw1", email=" A@x.com")

    assert pair.access_token


def test_sign_in_wrong_password_and_unknown_user_fail_alike(sign_up, sign_in, store) -> None:
    sign_up.execute("alice", "pw1", "a@x.com")

    with pytest.raises(InvalidCredentialsError):
        sign_in.execute("nope", username="alice")
    with pytest.raises(InvalidCredentialsError):
        sign_in.execute("pw1", username="mallory")
    with pytest.raises(InvalidCredentialsError):
        sign_in.execute("pw1")

    assert store.sessions == {}


def test_each_sign_in_opens_a_separate_session(sign_up, sign_in, store) -> None:
    sign_up.execute("alice", "pw1", "a@x.com")

    sign_in.execute("pw1", username="alice")
    sign_in.execute("pw1", username="alice")

    assert len(store.sessions) == 2


def test_refresh_rotates_secret_and_rejects_reuse(sign_up, sign_in, refresh, token_issuer) -> None:
    account = sign_up.execute("alice", "pw1", "a@x.com")
    first = sign_in.execute("pw1", username="alice")

    second = refresh.execute(first.refresh_token, account.id)

    assert second.refresh_token != first.refresh_token
    assert token_issuer.verify_access_token(second.access_token).account_id == account.id
    with pytest.raises(InvalidCredentialsError):
        refresh.execute(first.refresh_token, account.id)
    # The rotated secret keeps working.
    third = refresh.execute(second.refresh_token, account.id)
    assert third.refresh_token not in (first.refresh_token, second.refresh_token)


def test_refresh_extends_expiry_from_now(sign_up, sign_in, refresh, clock) -> None:
    account = sign_up.execute("alice", "pw1", "a@x.com")
    pair = sign_in.execute("pw1", username="alice")
    clock.advance(timedelta(days=10))

    rotated = refresh.execute(pair.refresh_token, account.id)

    assert rotated.refresh_expires_at == clock.now + REFRESH_TTL


def test_refresh_rejects_expired_session(sign_up, sign_in, refresh, clock) -> None:
    account = sign_up.execute("alice", "pw1", "a@x.com")
    pair = sign_in.execute("pw1", username="alice")
    clock.advance(REFRESH_TTL + timedelta(seconds=1))

    with pytest.raises(InvalidCredentialsError):
        refresh.execute(pair.refresh_token, account.id)


def test_refresh_rejects_secret_of_another_account(sign_up, sign_in, refresh) -> None:
    sign_up.execute("alice", "pw1", "a@x.com")
    bob = sign_up.execute("bob", "pw2", "b@x.com")
    alice_pair = sign_in.execute("pw1", username="alice")

    with pytest.raises(InvalidCredentialsError):
        refresh.execute(alice_pair.refresh_token, bob.id)


def test_refresh_rejects_empty_secret(sign_up, sign_in, refresh) -> None:
    account = sign_up.execute("alice", "pw1", "a@x.com")
    sign_in.execute("pw1", username="alice")

    with pytest.raises(InvalidCredentialsError):
        refresh.execute("", account.id)


def test_refresh_losing_rotation_race_fails(
    sign_up, sign_in, refresh, monkeypatch: pytest.MonkeyPatch
) -> None:
    account = sign_up.execute("alice", "pw1", "a@x.com")
    pair = sign_in.execute("pw1", username="alice")

    monkeypatch.setattr(InMemorySessionStore, "rotate", lambda self, *args: False)

    with pytest.raises(InvalidCredentialsError):
        refresh.execute(pair.refresh_token, account.id)


def test_sign_out_revokes_only_matching_session(
    sign_up, sign_in, refresh, uow_factory, hasher, store, clock
) -> None:
    account = sign_up.execute("alice", "pw1", "a@x.com")
    laptop = sign_in.execute("pw1", username="alice")
    phone = sign_in.execute("pw1", username="alice")
    sign_out = SignOutUseCase(uow_factory=uow_factory, password_hasher=hasher, clock=clock)

    assert sign_out.execute(laptop.refresh_token, account.id) is True
    assert sign_out.execute("unknown-secret", account.id) is False

    assert len(store.sessions) == 1
    with pytest.raises(InvalidCredentialsError):
        refresh.execute(laptop.refresh_token, account.id)
    assert refresh.execute(phone.refresh_token, account.id).access_token


def test_update_password(sign_up, sign_in, uow_factory, hasher) -> None:
    account = sign_up.execute("alice", "pw1", "a@x.com")
    use_case = UpdatePasswordUseCase(uow_factory=uow_factory, password_hasher=hasher)

    with pytest.raises(InvalidCredentialsError):
        use_case.execute(account.id, "wrong", "pw2")
    assert use_case.execute(account.id, "pw1", "pw2") == 0

    with pytest.raises(InvalidCredentialsError):
        sign_in.execute("pw1", username="alice")
    assert sign_in.execute("pw2", username="alice").access_token


def test_update_password_for_unknown_account(uow_factory, hasher) -> None:
    use_case = UpdatePasswordUseCase(uow_factory=uow_factory, password_hasher=hasher)

    with pytest.raises(InvalidCredentialsError):
        use_case.execute(999, "pw1", "pw2")


def test_read_update_delete_account(sign_up, uow_factory, store) -> None:
    alice = sign_up.execute("alice", "pw1", "a@x.com")
    sign_up.execute("bob", "pw2", "b@x.com")
    read = ReadAccountUseCase(uow_factory=uow_factory)
    update = UpdateAccountUseCase(uow_factory=uow_factory)
    delete = DeleteAccountUseCase(uow_factory=uow_factory)

    assert read.execute(alice.id).email == "a@x.com"

    updated = update.execute(alice.id, " alicia ", "ALICIA@x.com")
    assert (updated.username, updated.email) == ("alicia", "alicia@x.com")

    with pytest.raises(UserAlreadyExistsError):
        update.execute(alice.id, "bob", "alicia@x.com")
    assert read.execute(alice.id).username == "alicia"

    delete.execute(alice.id)
    with pytest.raises(AccountNotFoundError):
        read.execute(alice.id)
    with pytest.raises(AccountNotFoundError):
        delete.execute(alice.id)
    assert [a.username for a in store.accounts.values()] == ["bob"]


def test_update_account_keeps_own_identifiers(sign_up, uow_factory) -> None:
    alice = sign_up.execute("alice", "pw1", "a@x.com")
    update = UpdateAccountUseCase(uow_factory=uow_factory)

    updated = update.execute(alice.id, "alice", "a@x.com")

    assert updated == alice


class RecordingHasher(DeterministicHasher):
    def __init__(self) -> None:
        self.verified: list[tuple[str, str]] = []

    def verify(self, password: str, hashed: str) -> bool:
        self.verified.append((password, hashed))
        return super().verify(password, hashed)


def test_sign_in_checks_a_password_hash_on_every_failure(
    sign_up, uow_factory, token_issuer, clock
) -> None:
    sign_up.execute("alice", "pw1", "a@x.com")
    hasher = RecordingHasher()
    sign_in = SignInUseCase(
        uow_factory=uow_factory,
        password_hasher=hasher,
        token_issuer=token_issuer,
        refresh_ttl=REFRESH_TTL,
        clock=clock,
    )

    for attempt in (
        {"username": "alice"},
        {"username": "mallory"},
        {"email": "nobody@x.com"},
        {},
    ):
        hasher.verified.clear()
        with pytest.raises(InvalidCredentialsError):
            sign_in.execute("wrong", **attempt)
        assert len(hasher.verified) == 1
        assert hasher.verified[0][0] == "wrong"


def test_sign_in_reports_the_account(sign_up, sign_in) -> None:
    account = sign_up.execute("alice", "pw1", "a@x.com")

    assert sign_in.execute("pw1", username="alice").account_id == account.id


def test_sign_in_drops_expired_sessions(sign_up, sign_in, store, clock) -> None:
    account = sign_up.execute("alice", "pw1", "a@x.com")
    for _ in range(5):
        sign_in.execute("pw1", username="alice")
    clock.advance(REFRESH_TTL + timedelta(days=1))

    live = sign_in.execute("pw1", username="alice")

    [session] = store.sessions.values()
    assert session.account_id == account.id
    assert session.hashed_secret == f"hashed:{live.refresh_token}"


def test_refresh_only_checks_live_sessions(sign_up, uow_factory, token_issuer, clock) -> None:
    account = sign_up.execute("alice", "pw1", "a@x.com")
    hasher = RecordingHasher()
    refresh = RefreshAccessTokenUseCase(
        uow_factory=uow_factory,
        password_hasher=hasher,
        token_issuer=token_issuer,
        refresh_ttl=REFRESH_TTL,
        clock=clock,
    )
    with uow_factory() as uow:
        for n in range(10):
            uow.sessions.add(account.id, f"hashed:old-{n}", clock.now - timedelta(seconds=1))
        uow.sessions.add(account.id, "hashed:current", clock.now + REFRESH_TTL)

    refresh.execute("current", account.id)

    assert hasher.verified == [("current", "hashed:current")]


def test_update_password_revokes_every_session(
    sign_up, sign_in, refresh, uow_factory, hasher, store
) -> None:
    account = sign_up.execute("alice", "pw1", "a@x.com")
    laptop = sign_in.execute("pw1", username="alice")
    phone = sign_in.execute("pw1", username="alice")
    use_case = UpdatePasswordUseCase(uow_factory=uow_factory, password_hasher=hasher)

    assert use_case.execute(account.id, "pw1", "pw2") == 2

    assert store.sessions == {}
    for pair in (laptop, phone):
        with pytest.raises(InvalidCredentialsError):
            refresh.execute(pair.refresh_token, account.id)
