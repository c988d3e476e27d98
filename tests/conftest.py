"""Shared test fixtures."""

from __future__ import annotations

import random
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from lcc.assets.generator import LayeredAssetGenerator
from lcc.config import Settings
from lcc.context import AppContext
from lcc.database import MemoryGateway
from lcc.db.models import User
from lcc.ledger.client import InMemoryLedgerClient, LedgerEndpoints
from lcc.main import create_app
from lcc.quests.catalog import QUEST_SEED_DATA, build_catalog
from lcc.quests.tracker import new_quest_book

START = datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Settable clock injected into the context."""

    def __init__(self, start: datetime = START) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


class RecordingSleep:
    """Async sleep stand-in that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def catalog():
    return build_catalog(QUEST_SEED_DATA)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        store_backend="memory",
        ledger_provider="memory",
        log_format="console",
        data_dir=str(tmp_path / "data"),
        asset_output_dir=str(tmp_path / "output"),
        quest_catalog_path="",
    )


@pytest.fixture
def ctx(settings, clock, catalog) -> AppContext:
    """In-memory application context with a fake clock and no real sleeping."""
    endpoints = LedgerEndpoints(primary="http://primary.test", fallback="http://fallback.test")
    return AppContext(
        settings=settings,
        gateway=MemoryGateway(),
        ledger=InMemoryLedgerClient(),
        endpoints=endpoints,
        assets=LayeredAssetGenerator(
            output_dir=settings.asset_output_dir,
            public_base_url="http://test",
            creator_address=settings.server_wallet_address,
            rng=random.Random(7),
        ),
        catalog=catalog,
        clock=clock,
        sleep=RecordingSleep(),
    )


@pytest.fixture
def make_user(clock, catalog):
    """Factory for bare users (no password hashing)."""

    def _make(username: str = "alice") -> User:
        return User(
            username=username,
            password_hash="unused",
            quests=new_quest_book(clock(), catalog),
            created_at=clock(),
        )

    return _make


@pytest_asyncio.fixture
async def client(ctx: AppContext) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP test client bound to the in-memory context."""
    app = create_app(ctx)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _register(client: AsyncClient, username: str = "alice", password: str = "lemon-pass") -> None:
    response = await client.post("/api/v1/register", json={"username": username, "password": password})
    assert response.status_code == 200, response.text


@pytest_asyncio.fixture
async def registered(client: AsyncClient) -> dict:
    """Register a default user through the API."""
    await _register(client)
    return {"username": "alice", "password": "lemon-pass"}
