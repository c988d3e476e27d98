"""Pydantic schemas for feed endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field

from lcc.db.models import Comment, Post
from lcc.social.feed import MAX_CONTENT_LENGTH


class CreatePostRequest(BaseModel):
    wallet: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH)


class LikePostRequest(BaseModel):
    wallet: str | None = None
    post_index: int


class CreateCommentRequest(BaseModel):
    wallet: str = Field(..., min_length=1)
    post_index: int
    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH)


class CreateReplyRequest(BaseModel):
    wallet: str = Field(..., min_length=1)
    post_index: int
    path: list[int] = Field(..., min_length=1)
    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH)


class LikeCommentRequest(BaseModel):
    wallet: str | None = None
    post_index: int
    path: list[int] = Field(..., min_length=1)


class PostResponse(BaseModel):
    success: bool = True
    post: Post


class CommentResponse(BaseModel):
    success: bool = True
    comment: Comment


class LikeResponse(BaseModel):
    success: bool = True
    likes: int
