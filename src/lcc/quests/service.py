"""Quest operations: each one runs under the user's lock and commits once."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from lcc.db.models import QuestBook, QuestInstance, Recurrence, User
from lcc.quests.tracker import claim, ensure_quest_book, report_progress, reset_if_expired

if TYPE_CHECKING:
    from lcc.context import AppContext

logger = structlog.get_logger()


async def get_quests(ctx: AppContext, username: str) -> tuple[User, QuestBook]:
    """Return the user's quest book after daily/weekly reset checks."""
    user = ctx.get_user(username)
    async with ctx.user_lock(username):
        now = ctx.now()
        changed = ensure_quest_book(user, now, ctx.catalog)
        changed = reset_if_expired(user, "daily", now, ctx.catalog) or changed
        changed = reset_if_expired(user, "weekly", now, ctx.catalog) or changed
        changed = reset_if_expired(user, "limited", now, ctx.catalog) or changed
        if changed:
            await ctx.commit()
    assert user.quests is not None
    return user, user.quests


async def update_progress(
    ctx: AppContext,
    username: str,
    recurrence: Recurrence,
    quest_id: str,
    progress: int,
) -> QuestInstance:
    user = ctx.get_user(username)
    async with ctx.user_lock(username):
        ensure_quest_book(user, ctx.now(), ctx.catalog)
        quest = report_progress(user, recurrence, quest_id, progress)
        await ctx.commit()
    return quest


async def claim_reward(ctx: AppContext, username: str, quest_id: str) -> int:
    user = ctx.get_user(username)
    async with ctx.user_lock(username):
        ensure_quest_book(user, ctx.now(), ctx.catalog)
        reward = claim(user, quest_id)
        await ctx.commit()
    logger.info("quest_claimed", username=username, quest_id=quest_id, reward=reward)
    return reward
