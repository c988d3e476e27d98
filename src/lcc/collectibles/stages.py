"""Evolution stage ladder.

Stage N+1 is reachable from stage N only. ``min_points`` is both the gate and
the price when points (not staking rewards) pay for the evolution.
"""

from __future__ import annotations

from dataclasses import dataclass

_METADATA_BASE = "https://raw.githubusercontent.com/LemonClubCollective/NFT/refs/heads/main"


@dataclass(frozen=True)
class Stage:
    index: int
    name: str
    symbol: str
    key: str
    uri: str
    min_points: int


STAGES: tuple[Stage, ...] = (
    Stage(0, "Lemon Seed", "LSEED", "seed", f"{_METADATA_BASE}/seed.json", 0),
    Stage(1, "Lemon Sprout", "LSPRT", "sprout", f"{_METADATA_BASE}/sprout.json", 30),
    Stage(2, "Lemon Sapling", "LSAPL", "sapling", f"{_METADATA_BASE}/sapling.json", 60),
    Stage(3, "Lemon Tree", "LTREE", "tree", f"{_METADATA_BASE}/tree.json", 90),
)


def get_stage(index: int) -> Stage:
    return STAGES[index]


def next_stage_after(index: int) -> Stage | None:
    """Return the stage after ``index``, or None at the terminal stage."""
    if index + 1 < len(STAGES):
        return STAGES[index + 1]
    return None


def stage_for_name(name: str) -> Stage:
    """Resolve a ledger-reported name to a stage. Unknown names map to the first stage."""
    for stage in STAGES:
        if stage.name == name:
            return stage
    return STAGES[0]
