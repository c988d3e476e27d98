"""Account endpoints: /api/v1/register and /api/v1/login."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from lcc.context import AppContext
from lcc.dependencies import get_context
from lcc.users.schemas import (
    CollectiblePoints,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
)
from lcc.users.service import login, register

router = APIRouter(prefix="/api/v1", tags=["Users"])


@router.post("/register", response_model=RegisterResponse)
async def register_user(body: RegisterRequest, ctx: AppContext = Depends(get_context)):
    """Create an account."""
    await register(ctx, body.username, body.password)
    return RegisterResponse()


@router.post("/login", response_model=LoginResponse)
async def login_user(body: LoginRequest, ctx: AppContext = Depends(get_context)):
    """Log in and collect the daily point drop if the cooldown has elapsed."""
    result = await login(ctx, body.username, body.password)
    user = result.user
    return LoginResponse(
        wallet=user.wallet,
        points=user.points,
        last_login=user.last_login,
        collectibles=[
            CollectiblePoints(mint_reference=c.mint_reference, points=c.points)
            for c in user.collectibles
        ],
        points_awarded=result.points_awarded,
    )
