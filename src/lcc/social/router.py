"""Social feed endpoints: posts, comments, replies and likes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from lcc.context import AppContext
from lcc.db.models import Post
from lcc.dependencies import get_context
from lcc.social.schemas import (
    CommentResponse,
    CreateCommentRequest,
    CreatePostRequest,
    CreateReplyRequest,
    LikeCommentRequest,
    LikePostRequest,
    LikeResponse,
    PostResponse,
)
from lcc.social.service import add_comment, add_reply, create_post, like_comment, like_post

router = APIRouter(prefix="/api/v1/posts", tags=["Social"])


@router.get("", response_model=list[Post])
async def list_posts(ctx: AppContext = Depends(get_context)):
    """Newest first."""
    return ctx.posts


@router.post("", response_model=PostResponse)
async def submit_post(body: CreatePostRequest, ctx: AppContext = Depends(get_context)):
    post = await create_post(ctx, body.wallet, body.content)
    return PostResponse(post=post)


@router.post("/like", response_model=LikeResponse)
async def like(body: LikePostRequest, ctx: AppContext = Depends(get_context)):
    likes = await like_post(ctx, body.post_index)
    return LikeResponse(likes=likes)


@router.post("/comment", response_model=CommentResponse)
async def comment(body: CreateCommentRequest, ctx: AppContext = Depends(get_context)):
    created = await add_comment(ctx, body.wallet, body.post_index, body.content)
    return CommentResponse(comment=created)


@router.post("/comment/reply", response_model=CommentResponse)
async def reply(body: CreateReplyRequest, ctx: AppContext = Depends(get_context)):
    created = await add_reply(ctx, body.wallet, body.post_index, body.path, body.content)
    return CommentResponse(comment=created)


@router.post("/comment/like", response_model=LikeResponse)
async def like_reply(body: LikeCommentRequest, ctx: AppContext = Depends(get_context)):
    likes = await like_comment(ctx, body.post_index, body.path)
    return LikeResponse(likes=likes)
