"""Pydantic response models for collectible endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class MintRequest(BaseModel):
    wallet: str = Field(..., min_length=1, description="Owner address for the new collectible")


class LedgerIdentity(BaseModel):
    name: str
    symbol: str
    mint_reference: str


class CollectibleResponse(BaseModel):
    nft: LedgerIdentity
    stage: int
    points: int
    next_min_points: int | None = None
    staked: bool
    stake_start: datetime | None = None
    rewards: int
    pending_rewards: int = 0
    projected_rewards: int = 0
    minted_at: datetime
    image_ref: str


class CollectibleListResponse(BaseModel):
    success: bool = True
    nfts: list[CollectibleResponse]


class MintResponse(BaseModel):
    success: bool = True
    mint_reference: str
    transaction_signature: str
    image_ref: str
    metadata_ref: str
    minted_at: datetime


class StageSummary(BaseModel):
    name: str
    symbol: str


class EvolveResponse(BaseModel):
    success: bool = True
    new_stage: StageSummary
    transaction_signature: str
    used_rewards: bool
    image_ref: str


class StakeResponse(BaseModel):
    success: bool = True
    message: str


class UnstakeResponse(BaseModel):
    success: bool = True
    message: str
    earned: int
    rewards: int


class StageEntry(BaseModel):
    index: int
    name: str
    symbol: str
    min_points: int
    uri: str


class AllStagesResponse(BaseModel):
    stages: list[StageEntry]
