from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _check_email(value: str) -> str:
    value = value.strip()
    if not _EMAIL_RE.match(value):
        raise ValueError("Email address is not valid")
    return value


def _check_username(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Username cannot be empty")
    return value


class SignUpRequestDTO(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    password: str = Field(min_length=1, max_length=128)
    email: str = Field(min_length=3, max_length=254)

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        return _check_username(value)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _check_email(value)


class SignInRequestDTO(BaseModel):
    username: str | None = Field(default=None, max_length=64)
    email: str | None = Field(default=None, max_length=254)
    password: str = Field(min_length=1, max_length=128)

    @field_validator("username", "email")
    @classmethod
    def blank_as_missing(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @model_validator(mode="after")
    def require_identifier(self) -> "SignInRequestDTO":
        if self.username is None and self.email is None:
            raise ValueError("Either username or email is required")
        return self


class RefreshRequestDTO(BaseModel):
    refresh_token: str | None = Field(default=None, max_length=256)


class TokenResponseDTO(BaseModel):
    access_token: str
    token_type: str = "bearer"
    refresh_expires_at: datetime


class AccountDTO(BaseModel):
    id: int
    username: str
    email: str


class UpdateAccountRequestDTO(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    email: str = Field(min_length=3, max_length=254)

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        return _check_username(value)

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        return _check_email(value)


class UpdatePasswordRequestDTO(BaseModel):
    old_password: str = Field(min_length=1, max_length=128)
    new_password: str = Field(min_length=1, max_length=128)
