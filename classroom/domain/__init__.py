# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .accounts.entities import AccessClaims, Account, RefreshSession, TokenPair
from .classes.entities import (
    ClassDetails,
    ClassMember,
    ClassRole,
    Classroom,
    JoinCode,
)

__all__ = [
    "AccessClaims",
    "Account",
    "ClassDetails",
    "ClassMember",
    "ClassRole",
    "Classroom",
    "JoinCode",
    "RefreshSession",
    "TokenPair",
]
