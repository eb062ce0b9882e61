# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from flask import Blueprint, Response, jsonify, request
from pydantic import ValidationError

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
from classroom.domain.classes.exceptions import ClassAccessDeniedError
from classroom.infrastructure.audit import AuditAction, audit_log
from classroom.interfaces.http.auth import Authenticator, Identity, client_ip
from classroom.interfaces.http.dto.classes import (
    ClassDetailsDTO,
    ClassDTO,
    CreateClassRequestDTO,
    JoinClassRequestDTO,
    JoinCodeDTO,
    MembershipDTO,
    UpdateClassRequestDTO,
)
from classroom.shared.errors.validation import raise_validation_error


@contextmanager
def _audited(action: AuditAction, class_id: int, identity: Identity) -> Iterator[None]:
    try:
        yield
    except ClassAccessDeniedError:
        audit_log(
            AuditAction.CLASS_ACCESS_DENIED,
            account_id=identity.account_id,
            ip_address=client_ip(),
            details={"class_id": class_id, "attempted": action.value},
            success=False,
        )
        raise
    audit_log(
        action,
        account_id=identity.account_id,
        ip_address=client_ip(),
        details={"class_id": class_id},
    )


class ClassController:
    def __init__(
        self,
        *,
        authenticator: Authenticator,
        create_class: CreateClassUseCase,
        read_class: ReadClassUseCase,
        update_class: UpdateClassUseCase,
        delete_class: DeleteClassUseCase,
        generate_join_code: GenerateJoinCodeUseCase,
        join_class: JoinClassUseCase,
    ) -> None:
        self._authenticator = authenticator
        self._create_class = create_class
        self._read_class = read_class
        self._update_class = update_class
        self._delete_class = delete_class
        self._generate_join_code = generate_join_code
        self._join_class = join_class

    def create(self, *, identity: Identity) -> tuple[Response, int]:
        try:
            dto = CreateClassRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        classroom = self._create_class.execute(dto.name, dto.description, identity.account_id)
        audit_log(
            AuditAction.CLASS_CREATED,
            account_id=identity.account_id,
            ip_address=client_ip(),
            details={"class_id": classroom.id},
        )
        return jsonify(ClassDTO.model_validate(classroom).model_dump(mode="json")), 201

    def read(self, class_id: int, *, identity: Identity) -> Response:
        details = self._read_class.execute(class_id, identity.account_id)
        return jsonify(ClassDetailsDTO.model_validate(details).model_dump(mode="json"))

    def update(self, class_id: int, *, identity: Identity) -> Response:
        try:
            dto = UpdateClassRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        with _audited(AuditAction.CLASS_UPDATED, class_id, identity):
            classroom = self._update_class.execute(
                class_id, identity.account_id, dto.name, dto.description
            )
        return jsonify(ClassDTO.model_validate(classroom).model_dump(mode="json"))

    def delete(self, class_id: int, *, identity: Identity) -> tuple[Response, int]:
        with _audited(AuditAction.CLASS_DELETED, class_id, identity):
            self._delete_class.execute(class_id, identity.account_id)
        return Response(status=204), 204

    def join_code(self, class_id: int, *, identity: Identity) -> tuple[Response, int]:
        with _audited(AuditAction.JOIN_CODE_GENERATED, class_id, identity):
            join_code = self._generate_join_code.execute(class_id, identity.account_id)
        return jsonify(JoinCodeDTO.model_validate(join_code).model_dump(mode="json")), 201

    def join(self, *, identity: Identity) -> Response:
        try:
            dto = JoinClassRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        member = self._join_class.execute(dto.code, identity.account_id)
        audit_log(
            AuditAction.CLASS_JOINED,
            account_id=identity.account_id,
            ip_address=client_ip(),
            details={"class_id": member.class_id, "role": member.role.value},
        )
        payload = MembershipDTO(class_id=member.class_id, role=member.role.value)
        return jsonify(payload.model_dump())

    def as_blueprint(self) -> Blueprint:
        required = self._authenticator.required
        bp = Blueprint("classes", __name__, url_prefix="/api/classes")
        bp.add_url_rule("", endpoint="create", view_func=required(self.create), methods=["POST"])
        bp.add_url_rule("/join", endpoint="join", view_func=required(self.join), methods=["POST"])
        bp.add_url_rule(
            "/<int:class_id>", endpoint="read", view_func=required(self.read), methods=["GET"]
        )
        bp.add_url_rule(
            "/<int:class_id>",
            endpoint="update",
            view_func=required(self.update),
            methods=["PUT"],
        )
        bp.add_url_rule(
            "/<int:class_id>",
            endpoint="delete",
            view_func=required(self.delete),
            methods=["DELETE"],
        )
        bp.add_url_rule(
            "/<int:class_id>/join-code",
            endpoint="join_code",
            view_func=required(self.join_code),
            methods=["POST"],
        )
        return bp

