"""Cross-origin access for the Lemon Club web client.

The browser client calls the collectible, quest and feed endpoints from its
own origin; ``LCC_CORS_ORIGINS`` lists the origins it is served from. The
request id is exposed so the client can quote it when a mint or evolve fails.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lcc.config import Settings


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Let the configured client origins read and post to the API."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-Id"],
    )
