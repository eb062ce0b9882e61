# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from flask import Blueprint, Response, jsonify, request
from pydantic import ValidationError

from classroom.application.services.tokens import TokenIssuer
from classroom.application.use_cases.accounts.refresh_access_token import (
    RefreshAccessTokenUseCase,
)
from classroom.application.use_cases.accounts.sign_in import SignInUseCase
from classroom.application.use_cases.accounts.sign_out import SignOutUseCase
from classroom.application.use_cases.accounts.sign_up import SignUpUseCase
from classroom.domain.accounts.entities import TokenPair
from classroom.domain.accounts.exceptions import (
    AuthenticationRequiredError,
    InvalidCredentialsError,
)
from classroom.infrastructure.audit import AuditAction, audit_log
from classroom.interfaces.http.auth import client_ip, extract_bearer_token
from classroom.interfaces.http.dto.auth import (
    AccountDTO,
    RefreshRequestDTO,
    SignInRequestDTO,
    SignUpRequestDTO,
    TokenResponseDTO,
)
from classroom.shared.errors.validation import raise_validation_error
from classroom.shared.logging import logger

REFRESH_COOKIE = "refresh_token"
REFRESH_COOKIE_PATH = "/api/auth"


class AuthController:
    def __init__(
        self,
        *,
        sign_up_use_case: SignUpUseCase,
        sign_in_use_case: SignInUseCase,
        refresh_use_case: RefreshAccessTokenUseCase,
        sign_out_use_case: SignOutUseCase,
        token_issuer: TokenIssuer,
        cookie_secure: bool = False,
        cookie_samesite: str = "Strict",
    ) -> None:
        self._sign_up_use_case = sign_up_use_case
        self._sign_in_use_case = sign_in_use_case
        self._refresh_use_case = refresh_use_case
        self._sign_out_use_case = sign_out_use_case
        self._token_issuer = token_issuer
        self._cookie_secure = cookie_secure
        self._cookie_samesite = cookie_samesite

    def signup(self) -> tuple[Response, int]:
        try:
            dto = SignUpRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        account = self._sign_up_use_case.execute(dto.username, dto.password, dto.email)

        audit_log(
            AuditAction.SIGNUP,
            account_id=account.id,
            ip_address=client_ip(),
            details={"username": account.username},
        )
        payload = AccountDTO(id=account.id, username=account.username, email=account.email)
        return jsonify(payload.model_dump()), 201

    def signin(self) -> Response:
        try:
            dto = SignInRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)

        ip_address = client_ip()
        try:
            pair = self._sign_in_use_case.execute(
                dto.password, username=dto.username, email=dto.email
            )
        except InvalidCredentialsError:
            audit_log(
                AuditAction.SIGNIN_FAILED,
                ip_address=ip_address,
                details={"username": dto.username, "by_email": dto.username is None},
                success=False,
            )
            raise

        audit_log(AuditAction.SIGNIN_SUCCESS, account_id=pair.account_id, ip_address=ip_address)
        return self._token_response(pair)

    def refresh(self) -> Response:
        access_token = extract_bearer_token(request.headers.get("Authorization"))
        if access_token is None:
            raise AuthenticationRequiredError()
        # Expired tokens are fine here; the claim only selects which sessions to check.
        account_id = self._token_issuer.unsafe_extract_account_id(access_token)

        secret = self._refresh_secret()
        if not secret:
            raise InvalidCredentialsError()

        ip_address = client_ip()
        try:
            pair = self._refresh_use_case.execute(secret, account_id)
        except InvalidCredentialsError:
            audit_log(
                AuditAction.TOKEN_REFRESH_FAILED,
                account_id=account_id,
                ip_address=ip_address,
                success=False,
            )
            raise

        audit_log(AuditAction.TOKEN_REFRESHED, account_id=account_id, ip_address=ip_address)
        return self._token_response(pair)

    def signout(self) -> tuple[Response, int]:
        access_token = extract_bearer_token(request.headers.get("Authorization"))
        if access_token is None:
            raise AuthenticationRequiredError()
        account_id = self._token_issuer.unsafe_extract_account_id(access_token)

        secret = self._refresh_secret()
        revoked = self._sign_out_use_case.execute(secret or "", account_id)

        audit_log(
            AuditAction.SIGNOUT,
            account_id=account_id,
            ip_address=client_ip(),
            details={"revoked": revoked},
        )
        response = Response(status=204)
        response.delete_cookie(REFRESH_COOKIE, path=REFRESH_COOKIE_PATH)
        logger.info("auth.signout: ok")
        return response, 204

    def _refresh_secret(self) -> str | None:
        cookie_value = request.cookies.get(REFRESH_COOKIE)
        if cookie_value:
            return cookie_value
        try:
            dto = RefreshRequestDTO.model_validate(request.get_json(silent=True) or {})
        except ValidationError as exc:
            raise_validation_error(exc)
        return dto.refresh_token

    def _token_response(self, pair: TokenPair) -> Response:
        payload = TokenResponseDTO(
            access_token=pair.access_token,
            refresh_expires_at=pair.refresh_expires_at,
        )
        response = jsonify(payload.model_dump(mode="json"))
        response.set_cookie(
            REFRESH_COOKIE,
            pair.refresh_token,
            httponly=True,
            samesite=self._cookie_samesite,
            secure=self._cookie_secure,
            path=REFRESH_COOKIE_PATH,
            expires=pair.refresh_expires_at,
        )
        return response

    def as_blueprint(self) -> Blueprint:
        bp = Blueprint("auth", __name__, url_prefix="/api/auth")
        bp.add_url_rule("/signup", view_func=self.signup, methods=["POST"])
        bp.add_url_rule("/signin", view_func=self.signin, methods=["POST"])
        bp.add_url_rule("/refresh", view_func=self.refresh, methods=["POST"])
        bp.add_url_rule("/signout", view_func=self.signout, methods=["POST"])
        return bp
