# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from functools import cached_property

from classroom.application.services.password_hashing import WerkzeugPasswordHasher
from classroom.application.services.tokens import TokenIssuer
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
from classroom.application.use_cases.classes.join_codes import (
    GenerateJoinCodeUseCase,
    JoinClassUseCase,
)
from classroom.application.use_cases.classes.manage_class import (
    CreateClassUseCase,
    DeleteClassUseCase,
    ReadClassUseCase,
    UpdateClassUseCase,
)
from classroom.infrastructure.db import SessionFactory
from classroom.infrastructure.unit_of_work import SqlAlchemyUnitOfWork, sqlalchemy_uow_factory
from classroom.interfaces.http.auth import Authenticator
from classroom.interfaces.http.controllers.account_controller import AccountController
from classroom.interfaces.http.controllers.auth_controller import AuthController
from classroom.interfaces.http.controllers.class_controller import ClassController
from classroom.shared.config import AppConfig, load_config


class Container:
    def __init__(self, config: AppConfig | None = None) -> None:
        self._config = config or load_config()

    @property
    def config(self) -> AppConfig:
        return self._config

    @cached_property
    def password_hasher(self) -> WerkzeugPasswordHasher:
        return WerkzeugPasswordHasher(method=self._config.auth.password_hash_method)

    @cached_property
    def token_issuer(self) -> TokenIssuer:
        auth = self._config.auth
        return TokenIssuer(
            secret=auth.jwt_secret,
            algorithm=auth.jwt_algorithm,
            access_ttl=auth.access_token_ttl,
        )

    @cached_property
    def uow_factory(self) -> Callable[[], SqlAlchemyUnitOfWork]:
        return sqlalchemy_uow_factory(SessionFactory)

    @cached_property
    def authenticator(self) -> Authenticator:
        return Authenticator(
            token_issuer=self.token_issuer, debug_mode=self._config.debug_logging
        )

    # Account use cases

    @cached_property
    def sign_up_use_case(self) -> SignUpUseCase:
        return SignUpUseCase(uow_factory=self.uow_factory, password_hasher=self.password_hasher)

    @cached_property
    def sign_in_use_case(self) -> SignInUseCase:
        return SignInUseCase(
            uow_factory=self.uow_factory,
            password_hasher=self.password_hasher,
            token_issuer=self.token_issuer,
            refresh_ttl=self._config.auth.refresh_token_ttl,
        )

    @cached_property
    def refresh_access_token_use_case(self) -> RefreshAccessTokenUseCase:
        return RefreshAccessTokenUseCase(
            uow_factory=self.uow_factory,
            password_hasher=self.password_hasher,
            token_issuer=self.token_issuer,
            refresh_ttl=self._config.auth.refresh_token_ttl,
        )

    @cached_property
    def sign_out_use_case(self) -> SignOutUseCase:
        return SignOutUseCase(uow_factory=self.uow_factory, password_hasher=self.password_hasher)

    @cached_property
    def update_password_use_case(self) -> UpdatePasswordUseCase:
        return UpdatePasswordUseCase(
            uow_factory=self.uow_factory, password_hasher=self.password_hasher
        )

    @cached_property
    def read_account_use_case(self) -> ReadAccountUseCase:
        return ReadAccountUseCase(uow_factory=self.uow_factory)

    @cached_property
    def update_account_use_case(self) -> UpdateAccountUseCase:
        return UpdateAccountUseCase(uow_factory=self.uow_factory)

    @cached_property
    def delete_account_use_case(self) -> DeleteAccountUseCase:
        return DeleteAccountUseCase(uow_factory=self.uow_factory)

    # Class use cases

    @cached_property
    def create_class_use_case(self) -> CreateClassUseCase:
        return CreateClassUseCase(uow_factory=self.uow_factory)

    @cached_property
    def read_class_use_case(self) -> ReadClassUseCase:
        return ReadClassUseCase(uow_factory=self.uow_factory)

    @cached_property
    def update_class_use_case(self) -> UpdateClassUseCase:
        return UpdateClassUseCase(uow_factory=self.uow_factory)

    @cached_property
    def delete_class_use_case(self) -> DeleteClassUseCase:
        return DeleteClassUseCase(uow_factory=self.uow_factory)

    @cached_property
    def generate_join_code_use_case(self) -> GenerateJoinCodeUseCase:
        return GenerateJoinCodeUseCase(
            uow_factory=self.uow_factory, code_ttl=self._config.auth.join_code_ttl
        )

    @cached_property
    def join_class_use_case(self) -> JoinClassUseCase:
        return JoinClassUseCase(uow_factory=self.uow_factory)

    # Controllers

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(
            sign_up_use_case=self.sign_up_use_case,
            sign_in_use_case=self.sign_in_use_case,
            refresh_use_case=self.refresh_access_token_use_case,
            sign_out_use_case=self.sign_out_use_case,
            token_issuer=self.token_issuer,
            cookie_secure=self._config.security.cookie_secure,
            cookie_samesite=self._config.security.cookie_samesite,
        )

    @cached_property
    def account_controller(self) -> AccountController:
        return AccountController(
            authenticator=self.authenticator,
            read_account=self.read_account_use_case,
            update_account=self.update_account_use_case,
            delete_account=self.delete_account_use_case,
            update_password=self.update_password_use_case,
        )

    @cached_property
    def class_controller(self) -> ClassController:
        return ClassController(
            authenticator=self.authenticator,
            create_class=self.create_class_use_case,
            read_class=self.read_class_use_case,
            update_class=self.update_class_use_case,
            delete_class=self.delete_class_use_case,
            generate_join_code=self.generate_join_code_use_case,
            join_class=self.join_class_use_case,
        )


container = Container()
