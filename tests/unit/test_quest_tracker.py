"""Quest tracker tests: window resets, progress clamping, single-grant claims."""

from __future__ import annotations

from datetime import timedelta

import pytest

from lcc.errors import NotCompletable, QuestNotFound
from lcc.quests.tracker import (
    advance,
    claim,
    ensure_quest_book,
    find_any,
    new_quest_book,
    report_progress,
    reset_if_expired,
)


class TestNewQuestBook:
    def test_every_template_has_an_instance(self, clock, catalog):
        book = new_quest_book(clock(), catalog)
        assert [q.id for q in book.daily] == ["lemon-picker", "community-zest", "social-squeeze"]
        assert [q.id for q in book.weekly] == ["grove-keeper", "lemon-bard", "visit-sections"]
        assert [q.id for q in book.limited] == ["million-lemon-bash"]

    def test_limited_instances_have_no_reset_timestamp(self, clock, catalog):
        book = new_quest_book(clock(), catalog)
        assert all(q.reset_at == clock() for q in book.daily + book.weekly)
        assert all(q.reset_at is None for q in book.limited)

    def test_ensure_backfills_missing_book(self, make_user, clock, catalog):
        user = make_user()
        user.quests = None
        assert ensure_quest_book(user, clock(), catalog) is True
        assert ensure_quest_book(user, clock(), catalog) is False
        assert user.quests is not None


class TestResetIfExpired:
    def test_daily_not_reset_inside_window(self, make_user, clock, catalog):
        user = make_user()
        advance(user, "daily", "lemon-picker", 1)
        now = clock() + timedelta(hours=23, minutes=59)
        assert reset_if_expired(user, "daily", now, catalog) is False
        assert user.quests.find("daily", "lemon-picker").completed is True

    def test_daily_reset_at_24h(self, make_user, clock, catalog):
        user = make_user()
        advance(user, "daily", "lemon-picker", 1)
        claim(user, "lemon-picker")
        now = clock() + timedelta(days=1)
        assert reset_if_expired(user, "daily", now, catalog) is True
        quest = user.quests.find("daily", "lemon-picker")
        assert (quest.progress, quest.completed, quest.claimed) == (0, False, False)
        assert quest.reset_at == now

    def test_weekly_survives_a_day(self, make_user, clock, catalog):
        user = make_user()
        advance(user, "weekly", "lemon-bard", 3)
        assert reset_if_expired(user, "weekly", clock() + timedelta(days=6), catalog) is False
        assert user.quests.find("weekly", "lemon-bard").progress == 3
        assert reset_if_expired(user, "weekly", clock() + timedelta(days=7), catalog) is True
        assert user.quests.find("weekly", "lemon-bard").progress == 0

    def test_limited_never_resets(self, make_user, clock, catalog):
        user = make_user()
        advance(user, "limited", "million-lemon-bash", 1)
        assert reset_if_expired(user, "limited", clock() + timedelta(days=365), catalog) is False
        assert user.quests.find("limited", "million-lemon-bash").progress == 1

    def test_unexpired_instances_left_untouched(self, make_user, clock, catalog):
        user = make_user()
        stale = user.quests.find("daily", "lemon-picker")
        stale.reset_at = clock() - timedelta(days=2)
        stale.progress = 1
        stale.completed = True
        fresh = user.quests.find("daily", "social-squeeze")
        fresh.progress = 1

        reset_if_expired(user, "daily", clock(), catalog)

        assert user.quests.find("daily", "lemon-picker").progress == 0
        kept = user.quests.find("daily", "social-squeeze")
        assert kept.progress == 1
        assert kept.reset_at == clock()

    @pytest.mark.parametrize("recurrence", ["daily", "weekly", "limited"])
    def test_idempotent_for_same_now(self, make_user, clock, catalog, recurrence):
        user = make_user()
        for quest in user.quests.instances(recurrence):
            quest.reset_at = clock() - timedelta(days=30) if quest.reset_at else None
            quest.progress = 1
        now = clock()
        reset_if_expired(user, recurrence, now, catalog)
        before = user.quests.model_dump()
        assert reset_if_expired(user, recurrence, now, catalog) is False
        assert user.quests.model_dump() == before


class TestAdvance:
    def test_progress_clamped_to_goal(self, make_user):
        user = make_user()
        assert advance(user, "weekly", "grove-keeper", 10) is True
        quest = user.quests.find("weekly", "grove-keeper")
        assert quest.progress == 3
        assert quest.completed is True

    def test_completed_quest_is_noop(self, make_user):
        user = make_user()
        advance(user, "daily", "lemon-picker", 1)
        assert advance(user, "daily", "lemon-picker", 1) is False
        assert user.quests.find("daily", "lemon-picker").progress == 1

    def test_unknown_quest_is_noop(self, make_user):
        user = make_user()
        assert advance(user, "daily", "no-such-quest", 1) is False

    def test_wrong_class_is_noop(self, make_user):
        user = make_user()
        assert advance(user, "daily", "lemon-bard", 1) is False
        assert user.quests.find("weekly", "lemon-bard").progress == 0


class TestReportProgress:
    def test_clamps_to_bounds(self, make_user):
        user = make_user()
        assert report_progress(user, "weekly", "visit-sections", 99).progress == 7
        assert report_progress(user, "daily", "social-squeeze", -4).progress == 0

    def test_completion_is_sticky(self, make_user):
        user = make_user()
        report_progress(user, "daily", "social-squeeze", 2)
        claim(user, "social-squeeze")
        quest = report_progress(user, "daily", "social-squeeze", 0)
        assert quest.completed is True
        assert quest.claimed is True

    def test_unknown_quest_raises(self, make_user):
        user = make_user()
        with pytest.raises(QuestNotFound):
            report_progress(user, "daily", "grove-keeper", 1)


class TestClaim:
    def test_claim_grants_reward_once(self, make_user):
        user = make_user()
        advance(user, "daily", "lemon-picker", 1)
        assert claim(user, "lemon-picker") == 50
        assert user.points == 50

        for _ in range(3):
            with pytest.raises(NotCompletable):
                claim(user, "lemon-picker")
        assert user.points == 50

    def test_incomplete_quest_not_claimable(self, make_user):
        user = make_user()
        advance(user, "weekly", "lemon-bard", 4)
        with pytest.raises(NotCompletable):
            claim(user, "lemon-bard")
        assert user.points == 0
        assert user.quests.find("weekly", "lemon-bard").claimed is False

    def test_claim_searches_all_classes(self, make_user):
        user = make_user()
        advance(user, "limited", "million-lemon-bash", 2)
        assert claim(user, "million-lemon-bash") == 500

    def test_unknown_quest(self, make_user):
        user = make_user()
        with pytest.raises(QuestNotFound):
            claim(user, "does-not-exist")

    def test_claimed_implies_completed(self, make_user):
        user = make_user()
        advance(user, "daily", "community-zest", 1)
        claim(user, "community-zest")
        quest = find_any(user, "community-zest")
        assert quest.claimed and quest.completed
