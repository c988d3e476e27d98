"""Quest tracker: per-user quest instances, window resets, progress and claims.

All functions mutate the in-memory ``User`` only. Persisting the change is the
caller's job (one snapshot commit per operation).
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from lcc.db.models import RECURRENCES, QuestBook, QuestInstance, Recurrence, User
from lcc.errors import NotCompletable, QuestNotFound
from lcc.quests.catalog import QuestCatalog, QuestTemplate, get_quest_catalog

logger = logging.getLogger(__name__)

RESET_WINDOWS: dict[str, timedelta | None] = {
    "daily": timedelta(days=1),
    "weekly": timedelta(weeks=1),
    "limited": None,
}


def _fresh_instance(template: QuestTemplate, now: datetime) -> QuestInstance:
    return QuestInstance(
        id=template.id,
        name=template.name,
        desc=template.desc,
        goal=template.goal,
        reward=template.reward,
        reset_at=now if RESET_WINDOWS[template.recurrence] is not None else None,
    )


def new_quest_book(now: datetime, catalog: QuestCatalog | None = None) -> QuestBook:
    """Build a quest book with a fresh instance of every template."""
    catalog = catalog or get_quest_catalog()
    return QuestBook(
        **{
            recurrence: [_fresh_instance(t, now) for t in catalog.templates(recurrence)]
            for recurrence in RECURRENCES
        }
    )


def ensure_quest_book(user: User, now: datetime, catalog: QuestCatalog | None = None) -> bool:
    """Back-fill a missing quest book. Returns True if one was created."""
    if user.quests is not None:
        return False
    user.quests = new_quest_book(now, catalog)
    return True


def _is_expired(quest: QuestInstance, window: timedelta, now: datetime) -> bool:
    if quest.reset_at is None:
        return True
    return now - quest.reset_at >= window


def reset_if_expired(
    user: User,
    recurrence: Recurrence,
    now: datetime,
    catalog: QuestCatalog | None = None,
) -> bool:
    """Reinitialise every quest of ``recurrence`` whose window has elapsed.

    Instances still inside their window are kept as they are. Templates with no
    instance yet are added fresh. Returns True if anything changed; calling it
    again with the same ``now`` is a no-op.
    """
    catalog = catalog or get_quest_catalog()
    ensure_quest_book(user, now, catalog)
    assert user.quests is not None

    window = RESET_WINDOWS[recurrence]
    existing = {q.id: q for q in user.quests.instances(recurrence)}
    changed = False
    rebuilt: list[QuestInstance] = []

    for template in catalog.templates(recurrence):
        quest = existing.get(template.id)
        if quest is None:
            quest = _fresh_instance(template, now)
            changed = True
        elif window is not None and _is_expired(quest, window, now):
            quest = _fresh_instance(template, now)
            changed = True
        rebuilt.append(quest)

    if len(rebuilt) != len(existing):
        changed = True
    if changed:
        setattr(user.quests, recurrence, rebuilt)
        logger.debug("Reset %s quests for %s", recurrence, user.username)
    return changed


def advance(user: User, recurrence: Recurrence, quest_id: str, increment: int = 1) -> bool:
    """Add ``increment`` to a quest's progress, clamped to its goal.

    No-op (returns False) when the quest is unknown or already completed.
    """
    if user.quests is None:
        return False
    quest = user.quests.find(recurrence, quest_id)
    if quest is None or quest.completed:
        return False

    quest.progress = max(0, min(quest.progress + increment, quest.goal))
    if quest.progress >= quest.goal:
        quest.completed = True
    return True


def report_progress(user: User, recurrence: Recurrence, quest_id: str, progress: int) -> QuestInstance:
    """Set absolute progress reported by the client.

    Progress is clamped to ``[0, goal]``. Completion is sticky so a claimed
    quest always stays completed.
    """
    quest = user.quests.find(recurrence, quest_id) if user.quests else None
    if quest is None:
        raise QuestNotFound(f"Quest not found: {recurrence}/{quest_id}")

    quest.progress = max(0, min(progress, quest.goal))
    if quest.progress >= quest.goal:
        quest.completed = True
    return quest


def find_any(user: User, quest_id: str) -> QuestInstance | None:
    """Look a quest up across all recurrence classes."""
    if user.quests is None:
        return None
    for recurrence in RECURRENCES:
        quest = user.quests.find(recurrence, quest_id)
        if quest is not None:
            return quest
    return None


def claim(user: User, quest_id: str) -> int:
    """Convert a completed quest into points. Returns the reward granted.

    Raises:
        QuestNotFound: no instance with that id in any class.
        NotCompletable: not completed yet, or already claimed.
    """
    quest = find_any(user, quest_id)
    if quest is None:
        raise QuestNotFound(f"Quest not found: {quest_id}")

    logger.info(
        "Claim attempt %s for %s: progress %d/%d, completed=%s, claimed=%s",
        quest_id, user.username, quest.progress, quest.goal, quest.completed, quest.claimed,
    )
    if not quest.completed or quest.claimed:
        raise NotCompletable("Quest not completed or already claimed")

    quest.claimed = True
    user.points += quest.reward
    return quest.reward
