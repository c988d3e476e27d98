"""Collectible API endpoints: listing, mint, evolve, stake, unstake."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from lcc.collectibles.schemas import (
    AllStagesResponse,
    CollectibleListResponse,
    CollectibleResponse,
    EvolveResponse,
    LedgerIdentity,
    MintRequest,
    MintResponse,
    StageEntry,
    StageSummary,
    StakeResponse,
    UnstakeResponse,
)
from lcc.collectibles.service import (
    evolve,
    list_collectibles,
    mint,
    stake_collectible,
    unstake_collectible,
)
from lcc.collectibles.stages import STAGES
from lcc.context import AppContext
from lcc.dependencies import get_context

router = APIRouter(prefix="/api/v1", tags=["Collectibles"])


@router.get("/stages", response_model=AllStagesResponse)
async def list_stages():
    """Get the evolution ladder."""
    return AllStagesResponse(
        stages=[
            StageEntry(index=s.index, name=s.name, symbol=s.symbol, min_points=s.min_points, uri=s.uri)
            for s in STAGES
        ]
    )


@router.get("/collectibles/{username}", response_model=CollectibleListResponse)
async def get_collectibles(username: str, ctx: AppContext = Depends(get_context)):
    """Get a user's collectibles with a live staking projection."""
    views = await list_collectibles(ctx, username)
    return CollectibleListResponse(
        nfts=[
            CollectibleResponse(
                nft=LedgerIdentity(name=v.name, symbol=v.symbol, mint_reference=v.record.mint_reference),
                stage=v.record.stage,
                points=v.record.points,
                next_min_points=v.next_min_points,
                staked=v.record.staked,
                stake_start=v.record.stake_start,
                rewards=v.record.rewards,
                pending_rewards=v.pending_rewards,
                projected_rewards=v.projected_rewards,
                minted_at=v.record.minted_at,
                image_ref=v.record.image_ref,
            )
            for v in views
        ]
    )


@router.post("/mint/{username}", response_model=MintResponse)
async def mint_collectible(username: str, body: MintRequest, ctx: AppContext = Depends(get_context)):
    """Mint a Seed-stage collectible owned by ``body.wallet``."""
    result = await mint(ctx, username, body.wallet)
    return MintResponse(
        mint_reference=result.record.mint_reference,
        transaction_signature=result.tx_signature,
        image_ref=result.record.image_ref,
        metadata_ref=result.record.metadata_ref,
        minted_at=result.record.minted_at,
    )


@router.post("/evolve/{username}/{mint_reference}", response_model=EvolveResponse)
async def evolve_collectible(username: str, mint_reference: str, ctx: AppContext = Depends(get_context)):
    result = await evolve(ctx, username, mint_reference)
    return EvolveResponse(
        new_stage=StageSummary(name=result.outcome.stage.name, symbol=result.outcome.stage.symbol),
        transaction_signature=result.tx_signature,
        used_rewards=result.outcome.used_rewards,
        image_ref=result.record.image_ref,
    )


@router.post("/stake/{username}/{mint_reference}", response_model=StakeResponse)
async def stake(username: str, mint_reference: str, ctx: AppContext = Depends(get_context)):
    await stake_collectible(ctx, username, mint_reference)
    return StakeResponse(message="NFT staked")


@router.post("/unstake/{username}/{mint_reference}", response_model=UnstakeResponse)
async def unstake(username: str, mint_reference: str, ctx: AppContext = Depends(get_context)):
    record, earned = await unstake_collectible(ctx, username, mint_reference)
    return UnstakeResponse(message="NFT unstaked", earned=earned, rewards=record.rewards)
