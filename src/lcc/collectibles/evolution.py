"""Evolution policy.

A record evolves when it holds enough points for the next stage OR at least
``REWARD_UNITS_PER_EVOLUTION`` staking reward units. Exactly one resource pays:
reward units first, points otherwise.
"""

from __future__ import annotations

from dataclasses import dataclass

from lcc.collectibles.stages import Stage, next_stage_after
from lcc.db.models import Collectible
from lcc.errors import InsufficientProgress, NoNextStage

REWARD_UNITS_PER_EVOLUTION = 5


@dataclass(frozen=True)
class EvolutionOutcome:
    stage: Stage
    used_rewards: bool


def next_stage(record: Collectible) -> Stage | None:
    return next_stage_after(record.stage)


def can_evolve(record: Collectible, stage: Stage) -> bool:
    return record.points >= stage.min_points or record.rewards >= REWARD_UNITS_PER_EVOLUTION


def check_evolution(record: Collectible) -> Stage:
    """Return the stage the record would evolve into, without spending anything.

    Raises:
        NoNextStage: the record is at the terminal stage.
        InsufficientProgress: neither points nor reward units suffice.
    """
    stage = next_stage(record)
    if stage is None:
        raise NoNextStage("No next stage available")
    if not can_evolve(record, stage):
        raise InsufficientProgress(
            f"Not enough points or rewards (need {stage.min_points}+ points "
            f"or {REWARD_UNITS_PER_EVOLUTION}+ rewards)"
        )
    return stage


def apply_evolution(record: Collectible) -> EvolutionOutcome:
    """Spend the evolution cost and advance the record one stage."""
    stage = check_evolution(record)

    used_rewards = False
    if record.rewards >= REWARD_UNITS_PER_EVOLUTION:
        record.rewards -= REWARD_UNITS_PER_EVOLUTION
        used_rewards = True
    else:
        record.points -= stage.min_points

    record.stage = stage.index
    return EvolutionOutcome(stage=stage, used_rewards=used_rewards)
