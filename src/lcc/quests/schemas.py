"""Pydantic models for quest endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from lcc.db.models import Recurrence


class QuestResponse(BaseModel):
    id: str
    name: str
    desc: str
    goal: int
    reward: int
    progress: int
    completed: bool
    claimed: bool
    reset_at: datetime | None = None


class QuestBookResponse(BaseModel):
    success: bool = True
    daily: list[QuestResponse]
    weekly: list[QuestResponse]
    limited: list[QuestResponse]
    points: int


class QuestUpdateRequest(BaseModel):
    quest_id: str = Field(..., min_length=1)
    type: Recurrence
    progress: int


class QuestUpdateResponse(BaseModel):
    success: bool = True
    quest: QuestResponse


class QuestClaimRequest(BaseModel):
    quest_id: str = Field(..., min_length=1)


class QuestClaimResponse(BaseModel):
    success: bool = True
    points: int
    total_points: int
