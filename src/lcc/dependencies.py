"""Shared FastAPI dependencies."""

from fastapi import Request

from lcc.context import AppContext


def get_context(request: Request) -> AppContext:
    """Return the application context created during startup."""
    ctx: AppContext | None = getattr(request.app.state, "ctx", None)
    if ctx is None:
        msg = "Application context not initialized."
        raise RuntimeError(msg)
    return ctx
