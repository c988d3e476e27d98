"""Content tree helpers: validation, index-path resolution and author lookup.

Every path segment is checked before anything is mutated; a bad index raises
``InvalidPath`` and leaves the tree as it was.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from lcc.db.models import Comment, Post, User
from lcc.errors import InvalidPath, ValidationError

MAX_CONTENT_LENGTH = 280


def validate_content(content: str | None) -> str:
    if not content:
        raise ValidationError("Content required")
    if len(content) > MAX_CONTENT_LENGTH:
        raise ValidationError(f"Content must not exceed {MAX_CONTENT_LENGTH} characters")
    return content


def validate_author(author: str | None) -> str:
    if not author or not author.strip():
        raise ValidationError("Author wallet required")
    return author


def resolve_post(posts: Sequence[Post], index: int) -> Post:
    if index < 0 or index >= len(posts):
        raise InvalidPath(f"No post at index {index}")
    return posts[index]


def resolve_path(post: Post, path: Sequence[int]) -> Comment:
    """Walk ``path`` from the post's comments down through replies."""
    if not path:
        raise InvalidPath("Path must not be empty")

    level: list[Comment] = post.comments
    node: Comment | None = None
    for depth, index in enumerate(path):
        if index < 0 or index >= len(level):
            raise InvalidPath(f"Invalid path segment {index} at depth {depth}")
        node = level[index]
        level = node.replies
    assert node is not None
    return node


def resolve_author(users: Mapping[str, User], author: str) -> User | None:
    """Map a post author to a user: username, then wallet, then an owned mint reference."""
    user = users.get(author)
    if user is not None:
        return user
    for candidate in users.values():
        if candidate.wallet == author:
            return candidate
    for candidate in users.values():
        if candidate.find_collectible(author) is not None:
            return candidate
    return None
