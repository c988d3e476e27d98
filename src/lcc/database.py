"""Snapshot persistence gateways.

The store is saved whole on every committed operation. ``JsonFileGateway``
writes to a temp file in the target directory and renames it over the old
snapshot, so a crash mid-save leaves the previous snapshot intact.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from lcc.db.models import Post, Snapshot, User

logger = logging.getLogger(__name__)

SNAPSHOT_FILENAME = "state.json"


class SnapshotGateway(ABC):
    """Loads and saves the full user/post state."""

    @abstractmethod
    def load(self) -> tuple[dict[str, User], list[Post]]:
        """Return the stored state, or empty state when nothing was saved yet."""
        ...

    @abstractmethod
    def save(self, users: dict[str, User], posts: list[Post]) -> None:
        """Overwrite the stored state."""
        ...


class MemoryGateway(SnapshotGateway):
    """Keeps the last saved snapshot as a JSON document in memory."""

    def __init__(self) -> None:
        self._document: str | None = None
        self.saves = 0

    def load(self) -> tuple[dict[str, User], list[Post]]:
        if self._document is None:
            return {}, []
        snapshot = Snapshot.model_validate_json(self._document)
        return snapshot.users, snapshot.posts

    def save(self, users: dict[str, User], posts: list[Post]) -> None:
        self._document = Snapshot(users=users, posts=posts).model_dump_json()
        self.saves += 1


class JsonFileGateway(SnapshotGateway):
    """Single-file JSON snapshot with atomic replace."""

    def __init__(self, data_dir: str | Path) -> None:
        self.data_dir = Path(data_dir)
        self.path = self.data_dir / SNAPSHOT_FILENAME

    def load(self) -> tuple[dict[str, User], list[Post]]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("No snapshot at %s, starting fresh", self.path)
            return {}, []

        try:
            snapshot = Snapshot.model_validate_json(raw)
        except PydanticValidationError:
            logger.exception("Snapshot at %s is unreadable", self.path)
            raise
        logger.info(
            "Loaded snapshot: %d users, %d posts", len(snapshot.users), len(snapshot.posts)
        )
        return snapshot.users, snapshot.posts

    def save(self, users: dict[str, User], posts: list[Post]) -> None:
        document = Snapshot(users=users, posts=posts).model_dump(mode="json")
        self.data_dir.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(prefix=".state-", suffix=".json", dir=self.data_dir)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(document, fh, indent=2)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass
            raise


def create_gateway(backend: str, data_dir: str) -> SnapshotGateway:
    """Create a snapshot gateway based on configuration."""
    backend = backend.lower()
    if backend == "file":
        return JsonFileGateway(data_dir)
    if backend == "memory":
        return MemoryGateway()
    msg = f"Unsupported store backend: {backend}"
    raise ValueError(msg)
