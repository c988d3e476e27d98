"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from lcc.collectibles.router import router as collectibles_router
from lcc.config import get_settings
from lcc.context import AppContext, build_context
from lcc.health.router import router as health_router
from lcc.middleware import setup_middleware
from lcc.quests.router import router as quests_router
from lcc.social.router import router as social_router
from lcc.users.router import router as users_router

logger = structlog.get_logger()


def create_app(ctx: AppContext | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    A prebuilt ``ctx`` is used as-is; otherwise one is built from settings at startup.
    """
    settings = ctx.settings if ctx is not None else get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Startup and shutdown lifecycle."""
        if getattr(app.state, "ctx", None) is None:
            app.state.ctx = build_context(settings)
        current: AppContext = app.state.ctx
        logger.info(
            "startup",
            users=len(current.users),
            posts=len(current.posts),
            ledger=current.endpoints.active,
        )

        yield

        await current.commit()
        logger.info("shutdown")

    app = FastAPI(
        title="Lemon Club Collective API",
        description="Backend API for Lemon Club Collective: evolving collectibles, staking and quests",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.ctx = ctx

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(users_router)
    app.include_router(collectibles_router)
    app.include_router(quests_router)
    app.include_router(social_router)
    app.mount("/output", StaticFiles(directory=settings.asset_output_dir, check_dir=False), name="output")

    return app


app = create_app()
