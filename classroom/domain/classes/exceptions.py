# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from classroom.shared.errors.base import DomainError


class ClassNotFoundError(DomainError):
    code = "class_not_found"
    status = HTTPStatus.NOT_FOUND


class ClassAccessDeniedError(DomainError):
    code = "unauthorized"
    status = HTTPStatus.FORBIDDEN


class MembershipExistsError(DomainError):
    code = "already_member"
    status = HTTPStatus.CONFLICT


class JoinCodeCollisionError(DomainError):
    code = "join_code_collision"
    status = HTTPStatus.SERVICE_UNAVAILABLE
