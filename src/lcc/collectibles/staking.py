"""Staking ledger: one reward unit per full minute staked."""

from __future__ import annotations

from datetime import datetime

from lcc.db.models import Collectible
from lcc.errors import AlreadyStaked, NotStaked

SECONDS_PER_REWARD_UNIT = 60


def _units_for(record: Collectible, now: datetime) -> int:
    if not record.staked or record.stake_start is None:
        return 0
    elapsed_seconds = (now - record.stake_start).total_seconds()
    return max(0, int(elapsed_seconds // SECONDS_PER_REWARD_UNIT))


def stake(record: Collectible, now: datetime) -> None:
    if record.staked:
        raise AlreadyStaked("NFT already staked")
    record.staked = True
    record.stake_start = now


def unstake(record: Collectible, now: datetime) -> int:
    """Fold the current stake interval into ``rewards``. Returns units earned."""
    if not record.staked:
        raise NotStaked("NFT not staked")
    earned = _units_for(record, now)
    record.rewards += earned
    record.staked = False
    record.stake_start = None
    return earned


def preview_rewards(record: Collectible, now: datetime) -> int:
    """Units the current stake interval would yield if unstaked at ``now``."""
    return _units_for(record, now)


def projected_rewards(record: Collectible, now: datetime) -> int:
    return record.rewards + preview_rewards(record, now)
