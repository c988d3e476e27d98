"""Application context: the in-memory store plus every collaborator an operation needs.

One context is built at startup and handed to each service call. Nothing in
the service layer reaches for module globals.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TypeVar

import structlog

from lcc.assets.generator import AssetGenerator, LayeredAssetGenerator
from lcc.config import Settings
from lcc.database import SnapshotGateway, create_gateway
from lcc.db.models import Post, Snapshot, User
from lcc.errors import UserNotFound
from lcc.ledger.client import LedgerClient, LedgerEndpoints, create_ledger_client
from lcc.ledger.retry import call_with_retry
from lcc.quests.catalog import QuestCatalog, get_quest_catalog

logger = structlog.get_logger()

T = TypeVar("T")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class AppContext:
    settings: Settings
    gateway: SnapshotGateway
    ledger: LedgerClient
    endpoints: LedgerEndpoints
    assets: AssetGenerator
    catalog: QuestCatalog
    clock: Callable[[], datetime] = utcnow
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    users: dict[str, User] = field(default_factory=dict)
    posts: list[Post] = field(default_factory=list)
    last_save_ok: bool = True
    _user_locks: dict[str, asyncio.Lock] = field(default_factory=dict, repr=False)
    _feed_lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)
    _save_lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    def load(self) -> None:
        """Replace the in-memory state with the gateway's snapshot."""
        self.users, self.posts = self.gateway.load()

    def now(self) -> datetime:
        return self.clock()

    # --- Serialisation ---

    def user_lock(self, username: str) -> asyncio.Lock:
        """Per-user lock. Held for the whole of any operation mutating that user."""
        lock = self._user_locks.get(username)
        if lock is None:
            lock = asyncio.Lock()
            self._user_locks[username] = lock
        return lock

    @property
    def feed_lock(self) -> asyncio.Lock:
        return self._feed_lock

    def get_user(self, username: str) -> User:
        user = self.users.get(username)
        if user is None:
            raise UserNotFound("User not found, please login")
        return user

    # --- Persistence ---

    async def commit(self) -> bool:
        """Save a full snapshot of the current state.

        The snapshot is copied before the first await, so it reflects exactly
        the state at commit time. Save failures are logged and reported via the
        return value; the in-memory mutation stands.
        """
        snapshot = Snapshot(users=self.users, posts=self.posts).model_copy(deep=True)
        async with self._save_lock:
            try:
                await asyncio.to_thread(self.gateway.save, snapshot.users, snapshot.posts)
            except OSError:
                logger.exception("snapshot_save_failed")
                self.last_save_ok = False
                return False
        self.last_save_ok = True
        return True

    # --- Ledger ---

    async def call_ledger(self, operation: Callable[[], Awaitable[T]], label: str) -> T:
        return await call_with_retry(
            operation,
            self.endpoints,
            max_attempts=self.settings.ledger_max_attempts,
            base_delay=self.settings.ledger_retry_base_delay_seconds,
            sleep=self.sleep,
            label=label,
        )


def build_context(settings: Settings) -> AppContext:
    """Create a context from configuration and load the stored snapshot."""
    endpoints = LedgerEndpoints(primary=settings.primary_rpc_url, fallback=settings.fallback_rpc_url)
    ctx = AppContext(
        settings=settings,
        gateway=create_gateway(settings.store_backend, settings.data_dir),
        ledger=create_ledger_client(
            settings.ledger_provider,
            endpoints,
            authority=settings.server_wallet_address,
            timeout=settings.ledger_request_timeout_seconds,
            seller_fee_basis_points=settings.seller_fee_basis_points,
        ),
        endpoints=endpoints,
        assets=LayeredAssetGenerator(
            output_dir=settings.asset_output_dir,
            public_base_url=settings.public_base_url,
            creator_address=settings.server_wallet_address,
            seller_fee_basis_points=settings.seller_fee_basis_points,
            verify_layers=settings.asset_verify_layers,
        ),
        catalog=get_quest_catalog(),
    )
    ctx.load()
    return ctx
