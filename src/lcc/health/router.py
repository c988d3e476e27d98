"""Health, readiness, and version endpoints."""

from fastapi import APIRouter, Depends

from lcc.context import AppContext
from lcc.dependencies import get_context

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness check: returns 200 if the process is alive."""
    return {"status": "healthy"}


@router.get("/ready")
async def readiness(
    ctx: AppContext = Depends(get_context),  # noqa: B008
) -> dict[str, object]:
    """Readiness check: reports store and ledger endpoint state."""
    checks: dict[str, object] = {
        "store": "ok" if ctx.last_save_ok else "error: last snapshot save failed",
        "ledger": "ok" if not ctx.endpoints.on_fallback else "degraded: using fallback endpoint",
    }
    all_ok = all(v == "ok" for v in checks.values())
    return {
        "status": "ready" if all_ok else "degraded",
        "checks": checks,
        "users": len(ctx.users),
        "posts": len(ctx.posts),
    }


@router.get("/version")
async def version(
    ctx: AppContext = Depends(get_context),  # noqa: B008
) -> dict[str, str]:
    """Return API version and environment."""
    settings = ctx.settings
    return {
        "version": settings.app_version,
        "environment": settings.environment,
    }
