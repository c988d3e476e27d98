"""Quest API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from lcc.context import AppContext
from lcc.db.models import QuestInstance
from lcc.dependencies import get_context
from lcc.quests.schemas import (
    QuestBookResponse,
    QuestClaimRequest,
    QuestClaimResponse,
    QuestResponse,
    QuestUpdateRequest,
    QuestUpdateResponse,
)
from lcc.quests.service import claim_reward, get_quests, update_progress

router = APIRouter(prefix="/api/v1/quests", tags=["Quests"])


def _quest_response(quest: QuestInstance) -> QuestResponse:
    return QuestResponse(**quest.model_dump())


@router.get("/{username}", response_model=QuestBookResponse)
async def list_quests(username: str, ctx: AppContext = Depends(get_context)):
    """Get the user's quests, resetting any whose window has elapsed."""
    user, book = await get_quests(ctx, username)
    return QuestBookResponse(
        daily=[_quest_response(q) for q in book.daily],
        weekly=[_quest_response(q) for q in book.weekly],
        limited=[_quest_response(q) for q in book.limited],
        points=user.points,
    )


@router.post("/{username}/update", response_model=QuestUpdateResponse)
async def report_quest_progress(
    username: str,
    body: QuestUpdateRequest,
    ctx: AppContext = Depends(get_context),
):
    """Client-reported progress for quests the server cannot observe (link visits, section visits)."""
    quest = await update_progress(ctx, username, body.type, body.quest_id, body.progress)
    return QuestUpdateResponse(quest=_quest_response(quest))


@router.post("/{username}/claim", response_model=QuestClaimResponse)
async def claim_quest(username: str, body: QuestClaimRequest, ctx: AppContext = Depends(get_context)):
    reward = await claim_reward(ctx, username, body.quest_id)
    return QuestClaimResponse(points=reward, total_points=ctx.get_user(username).points)
