"""Persisted state models.

The whole store is a single snapshot: a username -> User mapping plus the
post feed. Everything here round-trips through ``model_dump(mode="json")`` and
``model_validate`` so the snapshot gateway never needs to know the shape.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

Recurrence = Literal["daily", "weekly", "limited"]
RECURRENCES: tuple[Recurrence, ...] = ("daily", "weekly", "limited")


# ---------------------------------------------------------------------------
# Quests
# ---------------------------------------------------------------------------


class QuestInstance(BaseModel):
    """Per-user progress copy of a quest template."""

    id: str
    name: str
    desc: str
    goal: int
    reward: int
    progress: int = 0
    completed: bool = False
    claimed: bool = False
    reset_at: datetime | None = None


class QuestBook(BaseModel):
    daily: list[QuestInstance] = Field(default_factory=list)
    weekly: list[QuestInstance] = Field(default_factory=list)
    limited: list[QuestInstance] = Field(default_factory=list)

    def instances(self, recurrence: Recurrence) -> list[QuestInstance]:
        return getattr(self, recurrence)

    def find(self, recurrence: Recurrence, quest_id: str) -> QuestInstance | None:
        for quest in self.instances(recurrence):
            if quest.id == quest_id:
                return quest
        return None


# ---------------------------------------------------------------------------
# Collectibles
# ---------------------------------------------------------------------------


class Collectible(BaseModel):
    """In-app state of one minted item."""

    mint_reference: str
    points: int = Field(0, ge=0)
    staked: bool = False
    stake_start: datetime | None = None
    rewards: int = Field(0, ge=0)
    stage: int = 0
    minted_at: datetime
    image_ref: str = ""
    metadata_ref: str = ""


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class User(BaseModel):
    username: str
    password_hash: str
    wallet: str | None = None
    collectibles: list[Collectible] = Field(default_factory=list)
    points: int = Field(0, ge=0)
    last_login: datetime | None = None
    quests: QuestBook | None = None
    created_at: datetime

    def find_collectible(self, mint_reference: str) -> Collectible | None:
        for record in self.collectibles:
            if record.mint_reference == mint_reference:
                return record
        return None


# ---------------------------------------------------------------------------
# Social feed
# ---------------------------------------------------------------------------


class Comment(BaseModel):
    """A comment on a post, or a reply to another comment."""

    author: str
    content: str
    created_at: datetime
    likes: int = 0
    replies: list[Comment] = Field(default_factory=list)


class Post(BaseModel):
    author: str
    content: str
    created_at: datetime
    likes: int = 0
    comments: list[Comment] = Field(default_factory=list)


Comment.model_rebuild()


class Snapshot(BaseModel):
    """Full persisted state."""

    users: dict[str, User] = Field(default_factory=dict)
    posts: list[Post] = Field(default_factory=list)
