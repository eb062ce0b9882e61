# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, jsonify, request
from pydantic import ValidationError

from classroom.application.use_cases.accounts.profile import (
    DeleteAccountUseCase,
    ReadAccountUseCase,
    UpdateAccountUseCase,
)
from classroom.application.use_cases.accounts.update_password import UpdatePasswordUseCase
from classroom.domain.accounts.entities import Account
from classroom.infrastructure.audit import AuditAction, audit_log
from classroom.interfaces.http.auth import Authenticator, Identity, client_ip
from classroom.interfaces.http.controllers.auth_controller import REFRESH_COOKIE, REFRESH_COOKIE_PATH
from classroom.interfaces.http.dto.auth import (
    AccountDTO,
    UpdateAccountRequestDTO,
    UpdatePasswordRequestDTO,
)
from classroom.shared.errors.validation import raise_validation_error


def _account_payload(account: Account) -> dict:
    return AccountDTO(id=account.id, username=account.username, email=account.email).model_dump()


class AccountController:
    def __init__(
        self,
        *,
        authenticator: Authenticator,
        read_account: ReadAccountUseCase,
        update_account: UpdateAccountUseCase,
        delete_account: DeleteAccountUseCase,
        update_password: UpdatePasswordUseCase,
    ) -> None:
        self._authenticator = authenticator
        self._read_account = read_account
        self._update_account = update_account
        self._delete_account = delete_account
        self._update_password = update_password

    def read(self, *, identity: Identity) -> Response:
        account = self._read_account.execute(identity.account_id)
        return jsonify(_account_payload(account))

    def update(self, *, identity: Identity) -> Response:
        try:
            dto = UpdateAccountRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        account = self._update_account.execute(identity.account_id, dto.username, dto.email)
        audit_log(AuditAction.ACCOUNT_UPDATED, account_id=account.id, ip_address=client_ip())
        return jsonify(_account_payload(account))

    def delete(self, *, identity: Identity) -> tuple[Response, int]:
        self._delete_account.execute(identity.account_id)
        audit_log(AuditAction.ACCOUNT_DELETED, account_id=identity.account_id, ip_address=client_ip())
        return Response(status=204), 204

    def change_password(self, *, identity: Identity) -> tuple[Response, int]:
        try:
            dto = UpdatePasswordRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        revoked = self._update_password.execute(
            identity.account_id, dto.old_password, dto.new_password
        )
        audit_log(
            AuditAction.PASSWORD_CHANGED,
            account_id=identity.account_id,
            ip_address=client_ip(),
            details={"sessions_revoked": revoked},
        )
        response = Response(status=204)
        response.delete_cookie(REFRESH_COOKIE, path=REFRESH_COOKIE_PATH)
        return response, 204

    def as_blueprint(self) -> Blueprint:
        required = self._authenticator.required
        bp = Blueprint("account", __name__, url_prefix="/api/me")
        bp.add_url_rule("", endpoint="read", view_func=required(self.read), methods=["GET"])
        bp.add_url_rule("", endpoint="update", view_func=required(self.update), methods=["PUT"])
        bp.add_url_rule(
            "", endpoint="delete", view_func=required(self.delete), methods=["DELETE"]
        )
        bp.add_url_rule(
            "/password",
            endpoint="change_password",
            view_func=required(self.change_password),
            methods=["PUT"],
        )
        return bp
