"""Layer pools and the weighted variant picker."""

from __future__ import annotations

import random
from collections.abc import Mapping, Sequence

from lcc.errors import AssetLoadError

_LAYER_BASE = "https://raw.githubusercontent.com/LemonClubCollective/NFT/main"


def _layers(*names: str) -> tuple[str, ...]:
    return tuple(f"{_LAYER_BASE}/{name}.png" for name in names)


LAYERS: dict[str, tuple[str, ...]] = {
    "backgrounds": _layers(
        "BGsunset", "BGsunsetforest1", "BGstars", "BGstars1", "BGnightforest",
        "BGnightforest1", "BGgreengrass", "BGgrassfield", "BGgrassfieldswirl",
        "BGforestsunset", "BGanimesunset", "BGcloudsevening", "BGforestgrass",
    ),
    "seed": _layers(
        "brownseed", "magicseed", "magicseed1", "magicseed2",
        "purpleseed", "purpleseed1", "purpleseed3", "greenseed",
    ),
    "sprout": _layers(
        "sprout", "magicsprout", "magicsprout1", "greensprout",
        "greensprout2", "purplesprout", "purplesprout1", "purplesprout2",
    ),
    "sapling": _layers(
        "sapling", "greensapling", "purplesapling", "purplesapling1", "purplesapling2",
        "redrubysapling", "redrubysapling2", "redrubysapling3",
        "goldensapling", "goldensapling1", "goldensapling2",
    ),
    "tree": _layers(
        "goldentree", "emeraldtree", "purpletree", "purpletree1", "redtree",
        "redtree1", "redtree2", "goldtree1", "goldtree2", "goldentree3", "diamondtree",
    ),
}

# Variant keyword -> relative weight. Checked in order.
RARITY_WEIGHTS: dict[str, float] = {
    "diamond": 0.2,
    "red": 0.4,
    "purple": 0.5,
}

_RARITY_NAMES: tuple[tuple[str, str], ...] = (
    ("diamond", "Diamond"),
    ("red", "Ruby"),
    ("purple", "Amethyst"),
)


def pick_variant(
    pool: Sequence[str],
    weights: Mapping[str, float] | None = None,
    rng: random.Random | None = None,
) -> str:
    """Pick one candidate from ``pool``.

    Without weights the choice is uniform. With weights, a keyword is drawn by
    cumulative-weight threshold scan and a candidate containing that keyword is
    chosen; if none contains it, the choice falls back to the whole pool.
    """
    if not pool:
        raise AssetLoadError("No items available for variant selection")
    rng = rng or random.Random()

    if weights:
        total = sum(weights.values())
        threshold = rng.random() * total
        cumulative = 0.0
        for keyword, weight in weights.items():
            cumulative += weight
            if threshold <= cumulative:
                matching = [item for item in pool if keyword in item]
                if matching:
                    return rng.choice(matching)
                return rng.choice(list(pool))

    return rng.choice(list(pool))


def rarity_for(layer: str) -> str:
    for keyword, rarity in _RARITY_NAMES:
        if keyword in layer:
            return rarity
    return "Common"
