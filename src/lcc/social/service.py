"""Feed operations. Posts are newest-first; comments and replies append."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import structlog

from lcc.db.models import Comment, Post, Recurrence
from lcc.quests.tracker import advance
from lcc.social.feed import (
    resolve_author,
    resolve_path,
    resolve_post,
    validate_author,
    validate_content,
)

if TYPE_CHECKING:
    from lcc.context import AppContext

logger = structlog.get_logger()

POST_QUESTS: tuple[tuple[Recurrence, str], ...] = (("daily", "community-zest"), ("weekly", "lemon-bard"))
COMMENT_QUESTS: tuple[tuple[Recurrence, str], ...] = (("weekly", "lemon-bard"),)


async def _credit_author(ctx: AppContext, author: str, quests: Sequence[tuple[Recurrence, str]]) -> None:
    user = resolve_author(ctx.users, author)
    if user is None:
        return
    async with ctx.user_lock(user.username):
        for recurrence, quest_id in quests:
            advance(user, recurrence, quest_id, 1)


async def create_post(ctx: AppContext, author: str, content: str) -> Post:
    validate_author(author)
    validate_content(content)
    async with ctx.feed_lock:
        post = Post(author=author, content=content, created_at=ctx.now())
        ctx.posts.insert(0, post)
        await _credit_author(ctx, author, POST_QUESTS)
        await ctx.commit()
    logger.info("post_created", author=author)
    return post


async def add_comment(ctx: AppContext, author: str, post_index: int, content: str) -> Comment:
    validate_author(author)
    validate_content(content)
    async with ctx.feed_lock:
        post = resolve_post(ctx.posts, post_index)
        comment = Comment(author=author, content=content, created_at=ctx.now())
        post.comments.append(comment)
        await _credit_author(ctx, author, COMMENT_QUESTS)
        await ctx.commit()
    return comment


async def add_reply(
    ctx: AppContext,
    author: str,
    post_index: int,
    path: Sequence[int],
    content: str,
) -> Comment:
    validate_author(author)
    validate_content(content)
    async with ctx.feed_lock:
        target = resolve_path(resolve_post(ctx.posts, post_index), path)
        reply = Comment(author=author, content=content, created_at=ctx.now())
        target.replies.append(reply)
        await _credit_author(ctx, author, COMMENT_QUESTS)
        await ctx.commit()
    return reply


async def like_post(ctx: AppContext, post_index: int) -> int:
    async with ctx.feed_lock:
        post = resolve_post(ctx.posts, post_index)
        post.likes += 1
        await ctx.commit()
    return post.likes


async def like_comment(ctx: AppContext, post_index: int, path: Sequence[int]) -> int:
    async with ctx.feed_lock:
        target = resolve_path(resolve_post(ctx.posts, post_index), path)
        target.likes += 1
        await ctx.commit()
    return target.likes
