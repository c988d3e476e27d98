"""User aggregate: registration and the login-gated daily point drop."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

import structlog

from lcc.auth.password import (
    PasswordStrengthError,
    hash_password,
    validate_password_strength,
    verify_password,
)
from lcc.db.models import User
from lcc.errors import InvalidCredentials, UsernameTaken, ValidationError
from lcc.quests.tracker import new_quest_book, reset_if_expired

if TYPE_CHECKING:
    from lcc.context import AppContext

logger = structlog.get_logger()

LOGIN_REWARD_INTERVAL = timedelta(days=1)


@dataclass(frozen=True)
class LoginResult:
    user: User
    points_awarded: bool


async def register(ctx: AppContext, username: str, password: str) -> User:
    """
    Create a user with a fresh quest book.

    Raises:
        ValidationError: missing or oversized username/password.
        UsernameTaken: the username already exists.
    """
    settings = ctx.settings
    if not username or not username.strip() or not password:
        raise ValidationError("Username and password required")
    if len(username) > settings.username_max_length:
        raise ValidationError(f"Username must not exceed {settings.username_max_length} characters")
    try:
        validate_password_strength(
            password,
            min_length=settings.password_min_length,
            max_length=settings.password_max_length,
        )
    except PasswordStrengthError as exc:
        raise ValidationError(str(exc)) from exc

    async with ctx.user_lock(username):
        if username in ctx.users:
            logger.warning("register_conflict", username=username)
            raise UsernameTaken("Username already taken")

        now = ctx.now()
        user = User(
            username=username,
            password_hash=hash_password(password),
            quests=new_quest_book(now, ctx.catalog),
            created_at=now,
        )
        ctx.users[username] = user
        await ctx.commit()

    logger.info("user_registered", username=username)
    return user


def award_login_points(user: User, now: datetime) -> bool:
    """Grant one point per owned collectible if a full day passed since the last award."""
    if user.last_login is not None and now - user.last_login < LOGIN_REWARD_INTERVAL:
        return False
    for record in user.collectibles:
        record.points += 1
    user.last_login = now
    return True


async def login(ctx: AppContext, username: str, password: str) -> LoginResult:
    """
    Verify credentials and run the daily reward check.

    Within the 24h cooldown nothing is mutated and ``points_awarded`` is False.
    """
    if not username or not password:
        raise ValidationError("Username and password required")

    user = ctx.users.get(username)
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("login_rejected", username=username)
        raise InvalidCredentials("Invalid credentials")

    async with ctx.user_lock(username):
        now = ctx.now()
        points_awarded = award_login_points(user, now)
        if points_awarded:
            reset_if_expired(user, "daily", now, ctx.catalog)
            reset_if_expired(user, "weekly", now, ctx.catalog)
            await ctx.commit()
            logger.info("login_reward", username=username, collectibles=len(user.collectibles))
        else:
            logger.info("login_cooldown", username=username)

    return LoginResult(user=user, points_awarded=points_awarded)
