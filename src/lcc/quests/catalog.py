"""Quest catalog: the static quest templates every user's quest book is built from.

The catalog is read once per process. ``LCC_QUEST_CATALOG_PATH`` may point to a
JSON file shaped like ``QUEST_SEED_DATA`` to replace the built-in templates.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from lcc.config import get_settings
from lcc.db.models import RECURRENCES, Recurrence

logger = logging.getLogger(__name__)

QUEST_SEED_DATA: dict[str, list[dict]] = {
    "daily": [
        {"id": "lemon-picker", "name": "Lemon Picker", "desc": "Mint 1 NFT", "goal": 1, "reward": 50},
        {"id": "community-zest", "name": "Community Zest", "desc": "Submit 1 forum post", "goal": 1, "reward": 25},
        {"id": "social-squeeze", "name": "Social Squeeze", "desc": "Visit 2 social media links", "goal": 2, "reward": 20},
    ],
    "weekly": [
        {"id": "grove-keeper", "name": "Grove Keeper", "desc": "Stake 3 NFTs", "goal": 3, "reward": 200},
        {"id": "lemon-bard", "name": "Lemon Bard", "desc": "Post 5 comments or posts", "goal": 5, "reward": 150},
        {"id": "visit-sections", "name": "Citrus Explorer", "desc": "Visit all 7 sections", "goal": 7, "reward": 100},
    ],
    "limited": [
        {"id": "million-lemon-bash", "name": "Million Lemon Bash", "desc": "Evolve 2 NFTs", "goal": 2, "reward": 500},
    ],
}


class QuestTemplate(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    desc: str
    goal: int = Field(..., gt=0)
    reward: int = Field(..., gt=0)
    recurrence: Recurrence


class QuestCatalog:
    """Immutable, recurrence-grouped view over the quest templates."""

    def __init__(self, templates: list[QuestTemplate]) -> None:
        seen: set[str] = set()
        for template in templates:
            if template.id in seen:
                msg = f"Duplicate quest id in catalog: {template.id}"
                raise ValueError(msg)
            seen.add(template.id)
        self._by_class: dict[str, tuple[QuestTemplate, ...]] = {
            recurrence: tuple(t for t in templates if t.recurrence == recurrence)
            for recurrence in RECURRENCES
        }

    def templates(self, recurrence: Recurrence) -> tuple[QuestTemplate, ...]:
        return self._by_class[recurrence]

    def get(self, quest_id: str) -> QuestTemplate | None:
        for recurrence in RECURRENCES:
            for template in self._by_class[recurrence]:
                if template.id == quest_id:
                    return template
        return None

    def __len__(self) -> int:
        return sum(len(group) for group in self._by_class.values())


def build_catalog(data: dict[str, list[dict]]) -> QuestCatalog:
    """Validate raw seed data into a catalog."""
    templates = [
        QuestTemplate(**entry, recurrence=recurrence)
        for recurrence, entries in data.items()
        for entry in entries
    ]
    return QuestCatalog(templates)


@lru_cache
def get_quest_catalog() -> QuestCatalog:
    """Get the process-wide quest catalog."""
    path = get_settings().quest_catalog_path
    if not path:
        return build_catalog(QUEST_SEED_DATA)

    data = json.loads(Path(path).read_text(encoding="utf-8"))
    catalog = build_catalog(data)
    logger.info("Loaded %d quest templates from %s", len(catalog), path)
    return catalog
