"""Collectible operations: mint, evolve, stake, unstake and the owner listing.

External calls (asset generation, ledger) happen before any local mutation, so
a collaborator failure leaves the user untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from lcc.collectibles.evolution import EvolutionOutcome, apply_evolution, check_evolution
from lcc.collectibles.stages import STAGES, Stage, get_stage, next_stage_after, stage_for_name
from lcc.collectibles.staking import preview_rewards, projected_rewards, stake, unstake
from lcc.db.models import Collectible, User
from lcc.errors import CollectibleNotFound, ExternalServiceError, InsufficientBalance, ValidationError
from lcc.quests.tracker import advance

if TYPE_CHECKING:
    from datetime import datetime

    from lcc.context import AppContext

logger = structlog.get_logger()


@dataclass(frozen=True)
class MintResult:
    record: Collectible
    tx_signature: str


@dataclass(frozen=True)
class EvolveResult:
    record: Collectible
    outcome: EvolutionOutcome
    tx_signature: str


@dataclass(frozen=True)
class CollectibleView:
    record: Collectible
    name: str
    symbol: str
    next_min_points: int | None
    pending_rewards: int
    projected_rewards: int


def _find_record(user: User, mint_reference: str) -> Collectible:
    record = user.find_collectible(mint_reference)
    if record is None:
        raise CollectibleNotFound("NFT not found")
    return record


def _token_id(now: datetime) -> int:
    return int(now.timestamp() * 1000)


async def list_collectibles(ctx: AppContext, username: str) -> list[CollectibleView]:
    """Owner listing with ledger name/symbol and a read-only staking projection."""
    user = ctx.users.get(username)
    if user is None:
        return []

    views: list[CollectibleView] = []
    for record in list(user.collectibles):
        asset = await ctx.call_ledger(
            lambda ref=record.mint_reference: ctx.ledger.find_by_reference(ref),
            label="find_by_reference",
        )
        stage = get_stage(record.stage)
        if asset.name and stage_for_name(asset.name).index != stage.index:
            logger.warning(
                "ledger_stage_mismatch",
                mint_reference=record.mint_reference,
                ledger_name=asset.name,
                local_stage=stage.name,
            )
        upcoming = next_stage_after(stage.index)
        now = ctx.now()
        views.append(CollectibleView(
            record=record,
            name=asset.name or stage.name,
            symbol=asset.symbol or stage.symbol,
            next_min_points=upcoming.min_points if upcoming else None,
            pending_rewards=preview_rewards(record, now),
            projected_rewards=projected_rewards(record, now),
        ))
    return views


async def mint(ctx: AppContext, username: str, owner_address: str) -> MintResult:
    """
    Mint a new Seed-stage collectible for ``username``.

    Raises:
        UserNotFound, ValidationError, InsufficientBalance, ExternalServiceError.
    """
    user = ctx.get_user(username)
    if not owner_address or not owner_address.strip():
        raise ValidationError("Owner wallet address required")

    async with ctx.user_lock(username):
        logger.info("mint_attempt", username=username, wallet=owner_address)
        authority = ctx.settings.server_wallet_address
        balance = await ctx.call_ledger(lambda: ctx.ledger.get_balance(authority), label="get_balance")
        if balance < ctx.settings.min_mint_balance:
            raise InsufficientBalance(
                f"Server wallet has insufficient balance ({balance}); fund {authority}"
            )

        seed = STAGES[0]
        token_id = _token_id(ctx.now())
        refs = await ctx.assets.generate(token_id, seed.name)
        receipt = await ctx.call_ledger(
            lambda: ctx.ledger.mint(owner_address, refs.metadata_ref, f"{seed.name} #{token_id}", seed.symbol),
            label="mint",
        )
        if not receipt.tx_signature or not receipt.mint_reference:
            raise ExternalServiceError("No transaction signature returned")

        record = Collectible(
            mint_reference=receipt.mint_reference,
            minted_at=ctx.now(),
            image_ref=refs.image_ref,
            metadata_ref=refs.metadata_ref,
        )
        user.collectibles.append(record)
        user.wallet = owner_address
        advance(user, "daily", "lemon-picker", 1)
        await ctx.commit()

    logger.info("mint_success", username=username, mint_reference=record.mint_reference, token_id=token_id)
    return MintResult(record=record, tx_signature=receipt.tx_signature)


async def evolve(ctx: AppContext, username: str, mint_reference: str) -> EvolveResult:
    """
    Advance a collectible one stage.

    The policy is checked first; new assets and the ledger metadata update
    follow; the spend is applied only once both succeeded.
    """
    user = ctx.get_user(username)
    async with ctx.user_lock(username):
        record = _find_record(user, mint_reference)
        target: Stage = check_evolution(record)

        token_id = _token_id(ctx.now())
        refs = await ctx.assets.generate(token_id, target.name)
        signature = await ctx.call_ledger(
            lambda: ctx.ledger.update_metadata(mint_reference, target.name, target.symbol, refs.metadata_ref),
            label="update_metadata",
        )

        outcome = apply_evolution(record)
        record.image_ref = refs.image_ref
        record.metadata_ref = refs.metadata_ref
        advance(user, "limited", "million-lemon-bash", 1)
        await ctx.commit()

    logger.info(
        "evolve_success",
        username=username,
        mint_reference=mint_reference,
        stage=outcome.stage.name,
        used_rewards=outcome.used_rewards,
    )
    return EvolveResult(record=record, outcome=outcome, tx_signature=signature)


async def stake_collectible(ctx: AppContext, username: str, mint_reference: str) -> Collectible:
    user = ctx.get_user(username)
    async with ctx.user_lock(username):
        record = _find_record(user, mint_reference)
        stake(record, ctx.now())
        advance(user, "weekly", "grove-keeper", 1)
        await ctx.commit()
    logger.info("staked", username=username, mint_reference=mint_reference)
    return record


async def unstake_collectible(ctx: AppContext, username: str, mint_reference: str) -> tuple[Collectible, int]:
    """Returns the record and the units earned by this stake interval."""
    user = ctx.get_user(username)
    async with ctx.user_lock(username):
        record = _find_record(user, mint_reference)
        earned = unstake(record, ctx.now())
        await ctx.commit()
    logger.info("unstaked", username=username, mint_reference=mint_reference, earned=earned)
    return record, earned
