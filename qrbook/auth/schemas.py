"""
Auth schemas (request/response models and session state).
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SessionState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    ACTIVE = "active"
    EXPIRED = "expired"


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=320)
    password: str = Field(..., min_length=1, max_length=128)


class LoginResponse(BaseModel):
    # The service returns the token next to arbitrary user fields.
    model_config = ConfigDict(extra="allow")

    token: str = ""


class Credential(BaseModel):
    model_config = ConfigDict(frozen=True)

    token: str = Field(..., min_length=1)
    user: dict[str, Any] = Field(default_factory=dict)
