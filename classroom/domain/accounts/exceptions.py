# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from classroom.shared.errors.base import DomainError


class UserAlreadyExistsError(DomainError):
    code = "user_exists"
    status = HTTPStatus.CONFLICT


class InvalidCredentialsError(DomainError):
    code = "invalid_credentials"
    status = HTTPStatus.UNAUTHORIZED


class AuthenticationRequiredError(DomainError):
    code = "authentication_required"
    status = HTTPStatus.UNAUTHORIZED


class InvalidTokenError(DomainError):
    code = "invalid_token"
    status = HTTPStatus.UNAUTHORIZED


class AccountNotFoundError(DomainError):
    code = "account_not_found"
    status = HTTPStatus.NOT_FOUND
