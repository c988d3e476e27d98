"""Request/response schemas for registration and login."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RegisterResponse(BaseModel):
    success: bool = True
    message: str = "Registered successfully"


class CollectiblePoints(BaseModel):
    mint_reference: str
    points: int


class LoginResponse(BaseModel):
    success: bool = True
    wallet: str | None = None
    points: int
    last_login: datetime | None = None
    collectibles: list[CollectiblePoints]
    points_awarded: bool
