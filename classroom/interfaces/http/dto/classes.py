# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CreateClassRequestDTO(BaseModel):
    name: str = Field("", max_length=128)
    description: str = Field("", max_length=2000)


class UpdateClassRequestDTO(BaseModel):
    name: str | None = Field(None, max_length=128)
    description: str | None = Field(None, max_length=2000)


class ClassDTO(BaseModel):
    id: int
    name: str
    description: str
    creator_id: int | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ClassDetailsDTO(BaseModel):
    id: int
    name: str
    description: str
    created_at: datetime
    created_by: str | None

    model_config = ConfigDict(from_attributes=True)


class JoinCodeDTO(BaseModel):
    code: str
    expires_at: datetime

    model_config = ConfigDict(from_attributes=True)


class JoinClassRequestDTO(BaseModel):
    code: str = Field(min_length=1, max_length=32)


class MembershipDTO(BaseModel):
    class_id: int
    role: str
