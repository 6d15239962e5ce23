"""
Tests for the weekly XP reset rule.
"""

import pytest

from conftest import local_ms
from database import ProgressionStore
from modules.weekly_reset import reset_weekly_if_needed, should_reset

WEEK_MS = 604_800_000
SUNDAY = local_ms(2024, 1, 7, 10, 0)
WEDNESDAY = local_ms(2024, 1, 3, 10, 0)


@pytest.mark.unit
class TestShouldReset:

    def test_sunday_after_a_week(self):
        assert should_reset(SUNDAY, SUNDAY - WEEK_MS)

    def test_first_sunday_ever(self):
        assert should_reset(SUNDAY, 0)

    def test_not_on_other_days(self):
        assert not should_reset(WEDNESDAY, 0)

    def test_not_within_a_week_of_last_reset(self):
        assert not should_reset(SUNDAY, SUNDAY - WEEK_MS + 1)


@pytest.mark.integration
class TestResetWeekly:

    @pytest.mark.asyncio
    async def test_reset_zeroes_weekly_xp_only(self, store, tmp_path):
        first = store.get_or_create("1", "100")
        first.weekly_xp = 300
        first.total_xp = 900
        store.get_or_create("2", "200").weekly_xp = 40

        assert await reset_weekly_if_needed(store, SUNDAY) is True

        assert [r.weekly_xp for r in store.records()] == [0, 0]
        assert first.total_xp == 900
        assert store.last_weekly_reset == SUNDAY

        reloaded = ProgressionStore(tmp_path / "user-levels.json")
        await reloaded.initialize()
        assert reloaded.find("1", "100").weekly_xp == 0
        assert reloaded.last_weekly_reset == SUNDAY

    @pytest.mark.asyncio
    async def test_no_second_reset_same_sunday(self, store):
        await reset_weekly_if_needed(store, SUNDAY)
        store.get_or_create("1", "100").weekly_xp = 75

        assert await reset_weekly_if_needed(store, SUNDAY + 3_600_000) is False
        assert store.find("1", "100").weekly_xp == 75

    @pytest.mark.asyncio
    async def test_next_sunday_resets_again(self, store):
        await reset_weekly_if_needed(store, SUNDAY)
        store.get_or_create("1", "100").weekly_xp = 75

        assert await reset_weekly_if_needed(store, SUNDAY + WEEK_MS) is True
        assert store.find("1", "100").weekly_xp == 0

    @pytest.mark.asyncio
    async def test_uses_store_clock_by_default(self, store, clock):
        store.get_or_create("1", "100").weekly_xp = 10

        # Fixture clock starts on a Wednesday
        assert await reset_weekly_if_needed(store) is False
        assert store.find("1", "100").weekly_xp == 10
