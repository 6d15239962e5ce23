"""
Tests for the XP engine: level curve, awards, cooldowns, boosters,
daily bonus, prestige and titles.
"""

import pytest

from database import ProgressionStore
from modules.leveling import (
    level_from_total_xp,
    total_xp_for_level,
    xp_for_level,
)


def set_total_xp(record, total_xp):
    record.total_xp = total_xp
    record.level, record.xp = level_from_total_xp(total_xp)


# ============================================================================
# LEVEL CURVE
# ============================================================================


@pytest.mark.unit
class TestLevelCurve:

    def test_known_thresholds(self):
        assert xp_for_level(1) == 165
        assert xp_for_level(2) == 360
        assert xp_for_level(3) == 585
        assert xp_for_level(10) == 3000

    def test_thresholds_strictly_increase(self):
        for level in range(0, 200):
            assert xp_for_level(level + 1) > xp_for_level(level)

    def test_level_boundaries(self):
        assert level_from_total_xp(0) == (0, 0)
        assert level_from_total_xp(164) == (0, 164)
        assert level_from_total_xp(165) == (1, 0)
        assert level_from_total_xp(524) == (1, 359)
        assert level_from_total_xp(525) == (2, 0)

    @pytest.mark.parametrize("total_xp", [0, 1, 165, 999, 12_345, 250_000, 999_999])
    def test_total_xp_reconstructs_from_level_and_remainder(self, total_xp):
        level, xp = level_from_total_xp(total_xp)

        assert total_xp == total_xp_for_level(level) + xp
        assert 0 <= xp < xp_for_level(level + 1)


# ============================================================================
# XP AWARDS
# ============================================================================


@pytest.mark.unit
class TestAwardXp:

    @pytest.mark.asyncio
    async def test_base_award_range(self, leveling):
        result = await leveling.award_xp("1", "100")

        assert 20 <= result["xp_gained"] <= 34
        assert result["multiplier"] == 1.0
        assert "new_level" not in result

    @pytest.mark.asyncio
    async def test_random_bonus_tops_out_at_14(self, leveling, monkeypatch):
        bounds = []

        def highest_roll(n):
            bounds.append(n)
            return n - 1

        monkeypatch.setattr(leveling.rng, "randrange", highest_roll)

        result = await leveling.award_xp("1", "100")

        assert bounds == [15]
        assert result["xp_gained"] == 34

    @pytest.mark.asyncio
    async def test_award_stays_within_range_across_rolls(self, leveling, clock):
        gains = set()
        for _ in range(150):
            result = await leveling.award_xp("1", "100")
            gains.add(result["xp_gained"])
            clock.advance(60_000)

        assert min(gains) >= 20
        assert max(gains) <= 34
        assert len(gains) > 1

    @pytest.mark.asyncio
    async def test_award_updates_record(self, fixed_roll, store, clock):
        await fixed_roll.award_xp("1", "100")

        record = store.find("1", "100")
        assert record.total_xp == 20
        assert record.weekly_xp == 20
        assert record.messages == 1
        assert record.last_xp_gain == clock.now
        assert (record.level, record.xp) == (0, 20)

    @pytest.mark.asyncio
    async def test_bonuses_add_up(self, fixed_roll, store):
        result = await fixed_roll.award_xp(
            "1", "100", has_media=True, is_long_message=True, voice_minutes=3
        )

        assert result["xp_gained"] == 20 + 25 + 15 + 30
        assert store.find("1", "100").voice_minutes == 3

    @pytest.mark.asyncio
    async def test_second_award_within_cooldown_is_ignored(self, leveling, store, clock):
        await leveling.award_xp("1", "100")
        before = store.find("1", "100").to_dict()

        clock.advance(59_999)
        result = await leveling.award_xp("1", "100")

        assert result is None
        assert store.find("1", "100").to_dict() == before

    @pytest.mark.asyncio
    async def test_cooldown_expires(self, leveling, clock):
        await leveling.award_xp("1", "100")
        clock.advance(60_000)

        assert await leveling.award_xp("1", "100") is not None

    @pytest.mark.asyncio
    async def test_cooldown_is_per_server(self, leveling):
        await leveling.award_xp("1", "100")

        assert await leveling.award_xp("1", "200") is not None

    @pytest.mark.asyncio
    async def test_cooldown_does_not_create_record(self, leveling, store):
        await leveling.award_xp("1", "100")
        await leveling.award_xp("1", "100")

        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_level_up_result(self, fixed_roll, store):
        set_total_xp(store.get_or_create("1", "100"), 160)

        result = await fixed_roll.award_xp("1", "100")

        assert result == {
            "user_id": "1",
            "guild_id": "100",
            "old_level": 0,
            "new_level": 1,
            "total_xp": 180,
            "xp_gained": 20,
            "multiplier": 1.0,
            "can_prestige": False,
        }

    @pytest.mark.asyncio
    async def test_reaching_prestige_level_flags_can_prestige(self, fixed_roll, store):
        set_total_xp(store.get_or_create("1", "100"), total_xp_for_level(50) - 5)

        result = await fixed_roll.award_xp("1", "100")

        assert result["new_level"] == 50
        assert result["can_prestige"] is True

    @pytest.mark.asyncio
    async def test_award_is_persisted(self, fixed_roll, tmp_path, clock):
        await fixed_roll.award_xp("1", "100")

        reloaded = ProgressionStore(tmp_path / "user-levels.json", clock=clock)
        await reloaded.initialize()
        assert reloaded.find("1", "100").total_xp == 20


# ============================================================================
# BOOSTERS
# ============================================================================


@pytest.mark.unit
class TestBoosters:

    @pytest.mark.asyncio
    async def test_booster_multiplies_award(self, fixed_roll):
        await fixed_roll.add_booster("1", "100", 0.5)

        result = await fixed_roll.award_xp("1", "100")

        assert result["multiplier"] == 1.5
        assert result["xp_gained"] == 30

    @pytest.mark.asyncio
    async def test_boosters_stack_and_floor(self, fixed_roll):
        await fixed_roll.add_booster("1", "100", 0.25)
        await fixed_roll.add_booster("1", "100", 0.3)

        result = await fixed_roll.award_xp("1", "100", has_media=True)

        assert result["multiplier"] == pytest.approx(1.55)
        assert result["xp_gained"] == int(45 * result["multiplier"])

    @pytest.mark.asyncio
    async def test_default_duration(self, leveling, clock):
        booster = await leveling.add_booster("1", "100", 1.0)

        assert booster.added_at == clock.now
        assert booster.expires_at == clock.now + 3_600_000

    @pytest.mark.asyncio
    async def test_expired_booster_is_pruned_on_read(self, leveling, store, clock):
        await leveling.add_booster("1", "100", 2.0, duration_ms=1_000)
        record = store.find("1", "100")

        clock.advance(1_000)

        assert leveling.get_active_multiplier(record) == 1.0
        assert record.active_boosters == []

    @pytest.mark.asyncio
    async def test_unexpired_booster_survives_read(self, leveling, store, clock):
        await leveling.add_booster("1", "100", 2.0, duration_ms=1_000)
        record = store.find("1", "100")

        clock.advance(999)

        assert leveling.get_active_multiplier(record) == 3.0
        assert len(record.active_boosters) == 1

    @pytest.mark.asyncio
    async def test_invalid_booster_rejected(self, leveling):
        with pytest.raises(ValueError):
            await leveling.add_booster("1", "100", 0)
        with pytest.raises(ValueError):
            await leveling.add_booster("1", "100", 1.0, duration_ms=0)


# ============================================================================
# DAILY BONUS
# ============================================================================


@pytest.mark.unit
class TestDailyBonus:

    @pytest.mark.asyncio
    async def test_first_claim(self, leveling, store):
        result = await leveling.claim_daily_bonus("1", "100")

        assert result == {"claimed": True, "xp_gained": 100, "leveled_up": False, "new_level": 0}
        record = store.find("1", "100")
        assert record.total_xp == 100
        assert record.weekly_xp == 100

    @pytest.mark.asyncio
    async def test_second_claim_reports_time_left(self, leveling, store, clock):
        await leveling.claim_daily_bonus("1", "100")
        clock.advance(5_000)

        result = await leveling.claim_daily_bonus("1", "100")

        assert result == {"claimed": False, "time_left": 86_400_000 - 5_000}
        assert store.find("1", "100").total_xp == 100

    @pytest.mark.asyncio
    async def test_claim_after_window(self, leveling, clock):
        await leveling.claim_daily_bonus("1", "100")
        clock.advance(86_400_000)

        result = await leveling.claim_daily_bonus("1", "100")

        assert result["claimed"] is True

    @pytest.mark.asyncio
    async def test_claim_reports_level_up(self, leveling, store):
        set_total_xp(store.get_or_create("1", "100"), 100)

        result = await leveling.claim_daily_bonus("1", "100")

        assert result["leveled_up"] is True
        assert result["new_level"] == 1


# ============================================================================
# PRESTIGE
# ============================================================================


@pytest.mark.unit
class TestPrestige:

    @pytest.mark.asyncio
    async def test_below_prestige_level_fails(self, leveling, store):
        record = store.get_or_create("1", "100")
        set_total_xp(record, total_xp_for_level(50) - 1)
        record.weekly_xp = 500

        result = await leveling.prestige("1", "100")

        assert result["success"] is False
        assert record.level == 49
        assert record.total_xp == total_xp_for_level(50) - 1
        assert record.prestige == 0
        assert record.weekly_xp == 500

    @pytest.mark.asyncio
    async def test_prestige_at_exactly_level_50(self, leveling, store):
        record = store.get_or_create("1", "100")
        total = total_xp_for_level(50)
        set_total_xp(record, total)
        record.weekly_xp = 1234

        result = await leveling.prestige("1", "100")

        retained = int(total * 0.1)
        assert result == {
            "success": True,
            "new_prestige": 1,
            "old_prestige": 0,
            "retained_xp": retained,
            "new_level": level_from_total_xp(retained)[0],
        }
        assert record.prestige == 1
        assert record.total_xp == retained
        assert record.weekly_xp == 0
        assert (record.level, record.xp) == level_from_total_xp(retained)

    @pytest.mark.asyncio
    async def test_prestige_is_persisted(self, leveling, store, tmp_path, clock):
        set_total_xp(store.get_or_create("1", "100"), total_xp_for_level(60))

        await leveling.prestige("1", "100")

        reloaded = ProgressionStore(tmp_path / "user-levels.json", clock=clock)
        await reloaded.initialize()
        assert reloaded.find("1", "100").prestige == 1


# ============================================================================
# TITLES
# ============================================================================


@pytest.mark.unit
class TestTitles:

    def test_level_zero_uses_first_title(self, leveling):
        title = leveling.get_user_title("1", "100")

        assert title == {"title": "👤 Civilian", "emoji": "👤", "prestige": 0}

    def test_level_above_table_is_clamped(self, leveling, store):
        set_total_xp(store.get_or_create("1", "100"), total_xp_for_level(75))

        assert leveling.get_user_title("1", "100")["title"] == "👑 Legendary Ascendant"

    def test_prestige_combines_titles(self, leveling, store):
        record = store.get_or_create("1", "100")
        set_total_xp(record, total_xp_for_level(10))
        record.prestige = 2

        title = leveling.get_user_title("1", "100")

        assert title["title"] == "🔱 Infinite Aura Warrior - Battle Disciple"
        assert title["prestige"] == 2

    def test_prestige_above_table_is_clamped(self, leveling, store):
        store.get_or_create("1", "100").prestige = 9

        title = leveling.get_user_title("1", "100")

        assert title["title"].startswith("🌠 Omni-Saiyan - ")
        assert title["emoji"] == "🌠"


@pytest.mark.unit
def test_progress_snapshot(leveling, store):
    set_total_xp(store.get_or_create("1", "100"), 200)

    progress = leveling.get_progress("1", "100")

    assert progress["level"] == 1
    assert progress["xp"] == 35
    assert progress["xp_needed"] == 360
    assert progress["can_prestige"] is False


@pytest.mark.unit
def test_config_and_milestones_are_copies(leveling):
    settings = leveling.get_config()
    settings["prestige_level"] = 1
    milestones = leveling.get_role_milestones()
    milestones.append(99)

    assert leveling.get_config()["prestige_level"] == 50
    assert leveling.get_config()["cooldown_ms"] == 60_000
    assert leveling.get_role_milestones() == [5, 10, 15, 20, 30, 50]
