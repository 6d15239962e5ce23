"""
============================================================================
LEVELING SYSTEM
============================================================================
XP engine for the leveling ledger:
- Message/voice XP awards with per-server cooldowns
- Temporary XP boosters (multipliers stack additively)
- Non-linear level curve
- Daily login bonus
- Prestige system (reset with partial XP retention)
- Level and prestige titles

All records are read and written through the ProgressionStore; every
successful mutation is persisted before the result is returned.
"""

import logging
import random
from typing import Callable, Dict, List, Optional, Tuple

import config
from database.progression_store import (
    Booster,
    ProgressionRecord,
    ProgressionStore,
    make_key,
    now_ms,
)

logger = logging.getLogger(__name__)


# ============================================================================
# TITLE DEFINITIONS
# ============================================================================

LEVEL_TITLES = {
    1: {'title': 'Civilian', 'emoji': '👤'},
    2: {'title': 'Martial Arts Student', 'emoji': '🥋'},
    3: {'title': 'Ki Novice', 'emoji': '✨'},
    4: {'title': 'Ki Apprentice', 'emoji': '⚡'},
    5: {'title': 'Battle Trainee', 'emoji': '⚔️'},
    6: {'title': 'Rising Fighter', 'emoji': '🔥'},
    7: {'title': 'Z-Warrior in Training', 'emoji': '💪'},
    8: {'title': 'Earth Defender', 'emoji': '🌍'},
    9: {'title': 'Ki Adept', 'emoji': '💫'},
    10: {'title': 'Battle Disciple', 'emoji': '🛡️'},
    11: {'title': 'Serious Combatant', 'emoji': '⚡'},
    12: {'title': 'Elite Recruit', 'emoji': '🎖️'},
    13: {'title': 'Ki Specialist', 'emoji': '✴️'},
    14: {'title': 'Spirit Warrior', 'emoji': '👊'},
    15: {'title': 'Saiyan-Blooded', 'emoji': '💥'},
    16: {'title': 'Saiyan Fighter', 'emoji': '🔴'},
    17: {'title': 'Saiyan Elite', 'emoji': '🟠'},
    18: {'title': 'Saiyan Vanguard', 'emoji': '🟡'},
    19: {'title': 'Saiyan Commander', 'emoji': '⭐'},
    20: {'title': 'Saiyan Champion', 'emoji': '🏆'},
    21: {'title': 'Awakened Saiyan', 'emoji': '💛'},
    22: {'title': 'Ascended Saiyan', 'emoji': '⚡'},
    23: {'title': 'Radiant Saiyan', 'emoji': '✨'},
    24: {'title': 'Empowered Saiyan', 'emoji': '💪'},
    25: {'title': 'Ultra Saiyan', 'emoji': '🌟'},
    26: {'title': 'Limit-Break Saiyan', 'emoji': '💥'},
    27: {'title': 'Primal Saiyan', 'emoji': '🦍'},
    28: {'title': 'Unleashed Saiyan', 'emoji': '⚡'},
    29: {'title': 'Blazing Saiyan', 'emoji': '🔥'},
    30: {'title': 'Golden Aura Warrior', 'emoji': '🟡'},
    31: {'title': 'Apex Saiyan', 'emoji': '🔺'},
    32: {'title': 'Transcendent Warrior', 'emoji': '🌠'},
    33: {'title': 'Hyper-Ki Ascendant', 'emoji': '⚡'},
    34: {'title': 'Celestial Saiyan', 'emoji': '☄️'},
    35: {'title': 'Ultra Instinct Initiate', 'emoji': '🤍'},
    36: {'title': 'Ultra Instinct Adept', 'emoji': '💠'},
    37: {'title': 'Ultra Instinct Warrior', 'emoji': '💎'},
    38: {'title': 'Ultra Instinct Master', 'emoji': '🔷'},
    39: {'title': 'Ultra Instinct Ascendant', 'emoji': '🔮'},
    40: {'title': 'Ultra Instinct Supreme', 'emoji': '👁️'},
    41: {'title': 'Divine Aura Warrior', 'emoji': '🌌'},
    42: {'title': 'Spirit-God Disciple', 'emoji': '🙏'},
    43: {'title': 'Ki-Deity', 'emoji': '⚜️'},
    44: {'title': 'God Ki Initiate', 'emoji': '🔵'},
    45: {'title': 'God Ki Practitioner', 'emoji': '💙'},
    46: {'title': 'God Ki Warrior', 'emoji': '🌀'},
    47: {'title': 'God Ki Master', 'emoji': '💫'},
    48: {'title': 'Cosmic Saiyan', 'emoji': '🌌'},
    49: {'title': 'Universal Champion', 'emoji': '🌟'},
    50: {'title': 'Legendary Ascendant', 'emoji': '👑'},
}

PRESTIGE_TITLES = {
    1: {'title': 'Eternal Saiyan', 'emoji': '♾️'},
    2: {'title': 'Infinite Aura Warrior', 'emoji': '🔱'},
    3: {'title': 'Timeless Instinct Master', 'emoji': '⏳'},
    4: {'title': 'Cosmic Vanguard', 'emoji': '🪐'},
    5: {'title': 'Omni-Saiyan', 'emoji': '🌠'},
}

MAX_TITLE_LEVEL = max(LEVEL_TITLES)
MAX_TITLE_PRESTIGE = max(PRESTIGE_TITLES)


# ============================================================================
# LEVEL CURVE
# ============================================================================

def xp_for_level(level: int) -> int:
    """XP needed to advance from `level - 1` to `level`."""
    return int(level * config.XP_LEVEL_MULTIPLIER * (1 + level * 0.1))


def level_from_total_xp(total_xp: int) -> Tuple[int, int]:
    """
    Walk the level curve.

    Returns:
        (level, xp into that level)
    """
    level = 0
    remaining = total_xp
    while remaining >= xp_for_level(level + 1):
        remaining -= xp_for_level(level + 1)
        level += 1
    return level, remaining


def total_xp_for_level(level: int) -> int:
    """Cumulative XP at which `level` is reached."""
    return sum(xp_for_level(i) for i in range(1, level + 1))


def level_title(level: int) -> Dict:
    """Title entry for a level, clamped to the table's 1..50 range."""
    return LEVEL_TITLES[min(max(level, 1), MAX_TITLE_LEVEL)]


def prestige_title(prestige: int) -> Dict:
    """Title entry for a prestige rank, clamped to 1..5."""
    return PRESTIGE_TITLES[min(max(prestige, 1), MAX_TITLE_PRESTIGE)]


# ============================================================================
# ENGINE
# ============================================================================

class LevelingSystem:
    """
    XP awards, boosters, daily bonus and prestige on top of a ProgressionStore.

    Cooldowns are kept in memory only; a restart clears them.
    """

    def __init__(
        self,
        store: ProgressionStore,
        clock: Optional[Callable[[], int]] = None,
        rng: Optional[random.Random] = None
    ):
        self.store = store
        self.clock = clock or now_ms
        self.rng = rng or random.Random()
        self.cooldowns: Dict[str, int] = {}

    @staticmethod
    def _apply_level(record: ProgressionRecord):
        record.level, record.xp = level_from_total_xp(record.total_xp)

    # ========================================================================
    # COOLDOWNS & BOOSTERS
    # ========================================================================

    def is_on_cooldown(self, user_id: str, guild_id: str) -> bool:
        last_gain = self.cooldowns.get(make_key(user_id, guild_id), 0)
        return self.clock() - last_gain < config.XP_COOLDOWN_MS

    def get_active_multiplier(self, record: ProgressionRecord) -> float:
        """
        Sum of 1.0 and every unexpired booster. Expired boosters are dropped
        from the record as a side effect.
        """
        now = self.clock()
        record.active_boosters = [b for b in record.active_boosters if b.expires_at > now]

        multiplier = 1.0
        for booster in record.active_boosters:
            multiplier += booster.multiplier
        return multiplier

    async def add_booster(
        self,
        user_id: str,
        guild_id: str,
        multiplier: float,
        duration_ms: int = None
    ) -> Booster:
        """
        Give a user a temporary XP booster.

        Args:
            multiplier: Bonus added on top of the base 1.0x (0.5 = +50%)
            duration_ms: Lifetime (defaults to config.DEFAULT_BOOSTER_DURATION_MS)

        Returns:
            The stored Booster
        """
        if duration_ms is None:
            duration_ms = config.DEFAULT_BOOSTER_DURATION_MS
        if multiplier <= 0:
            raise ValueError("Booster multiplier must be positive")
        if duration_ms <= 0:
            raise ValueError("Booster duration must be positive")

        record = self.store.get_or_create(user_id, guild_id)
        now = self.clock()
        booster = Booster(multiplier=multiplier, expires_at=now + duration_ms, added_at=now)
        record.active_boosters.append(booster)
        await self.store.persist()

        logger.info(f"Booster +{multiplier}x for {duration_ms}ms added to {user_id} in {guild_id}")
        return booster

    # ========================================================================
    # XP AWARDS
    # ========================================================================

    async def award_xp(
        self,
        user_id: str,
        guild_id: str,
        has_media: bool = False,
        is_long_message: bool = False,
        voice_minutes: int = 0
    ) -> Optional[Dict]:
        """
        Award XP for an activity event.

        Args:
            user_id: Discord user ID
            guild_id: Discord guild ID
            has_media: Message carried attachments
            is_long_message: Message counts as long
            voice_minutes: Whole minutes spent in voice

        Returns:
            None while on cooldown. Otherwise a dict with 'xp_gained' and
            'multiplier'; on level up it also carries 'old_level',
            'new_level', 'total_xp', 'can_prestige', 'user_id', 'guild_id'.
        """
        if self.is_on_cooldown(user_id, guild_id):
            return None

        now = self.clock()
        record = self.store.get_or_create(user_id, guild_id)
        self.cooldowns[make_key(user_id, guild_id)] = now

        xp_gain = config.XP_PER_MESSAGE + self.rng.randrange(config.XP_RANDOM_BONUS)
        if has_media:
            xp_gain += config.BONUS_MEDIA_UPLOAD
        if is_long_message:
            xp_gain += config.BONUS_LONG_MESSAGE
        if voice_minutes:
            xp_gain += voice_minutes * config.BONUS_VOICE_PER_MINUTE
            record.voice_minutes += voice_minutes

        multiplier = self.get_active_multiplier(record)
        xp_gain = int(xp_gain * multiplier)

        old_level = record.level
        record.total_xp += xp_gain
        record.messages += 1
        record.weekly_xp += xp_gain
        record.last_xp_gain = now
        self._apply_level(record)

        await self.store.persist()

        if record.level > old_level:
            logger.info(f"{user_id} leveled up in {guild_id}: {old_level} -> {record.level}")
            return {
                'user_id': record.user_id,
                'guild_id': record.guild_id,
                'old_level': old_level,
                'new_level': record.level,
                'total_xp': record.total_xp,
                'xp_gained': xp_gain,
                'multiplier': multiplier,
                'can_prestige': record.level >= config.PRESTIGE_LEVEL,
            }

        return {'xp_gained': xp_gain, 'multiplier': multiplier}

    async def claim_daily_bonus(self, user_id: str, guild_id: str) -> Dict:
        """
        Claim the flat daily bonus, at most once per 24h window.

        Returns:
            {'claimed': False, 'time_left': ms} or
            {'claimed': True, 'xp_gained', 'leveled_up', 'new_level'}
        """
        record = self.store.get_or_create(user_id, guild_id)
        now = self.clock()

        elapsed = now - record.last_daily_login
        if elapsed < config.DAILY_LOGIN_WINDOW_MS:
            return {
                'claimed': False,
                'time_left': config.DAILY_LOGIN_WINDOW_MS - elapsed
            }

        old_level = record.level
        record.last_daily_login = now
        record.total_xp += config.DAILY_LOGIN_BONUS
        record.weekly_xp += config.DAILY_LOGIN_BONUS
        self._apply_level(record)

        await self.store.persist()

        return {
            'claimed': True,
            'xp_gained': config.DAILY_LOGIN_BONUS,
            'leveled_up': record.level > old_level,
            'new_level': record.level
        }

    # ========================================================================
    # PRESTIGE SYSTEM
    # ========================================================================

    async def prestige(self, user_id: str, guild_id: str) -> Dict:
        """
        Trade current progress for the next prestige rank, keeping a fraction
        of total XP.

        Returns:
            {'success': False, 'reason', 'required_level'} below the prestige
            level, else {'success': True, 'new_prestige', 'old_prestige',
            'retained_xp', 'new_level'}
        """
        record = self.store.get_or_create(user_id, guild_id)

        if record.level < config.PRESTIGE_LEVEL:
            return {
                'success': False,
                'reason': 'Level too low',
                'required_level': config.PRESTIGE_LEVEL
            }

        retained_xp = int(record.total_xp * config.PRESTIGE_XP_RETENTION)
        old_prestige = record.prestige

        record.prestige += 1
        record.total_xp = retained_xp
        record.weekly_xp = 0
        self._apply_level(record)

        await self.store.persist()

        logger.info(f"{user_id} reached prestige {record.prestige} in {guild_id}")
        return {
            'success': True,
            'new_prestige': record.prestige,
            'old_prestige': old_prestige,
            'retained_xp': retained_xp,
            'new_level': record.level
        }

    # ========================================================================
    # READ HELPERS
    # ========================================================================

    def get_user_title(self, user_id: str, guild_id: str) -> Dict:
        """Display title combining prestige and level tiers."""
        record = self.store.get_or_create(user_id, guild_id)

        if record.prestige > 0:
            prestige_data = prestige_title(record.prestige)
            level_data = level_title(record.level)
            return {
                'title': f"{prestige_data['emoji']} {prestige_data['title']} - {level_data['title']}",
                'emoji': prestige_data['emoji'],
                'prestige': record.prestige
            }

        level_data = level_title(record.level)
        return {
            'title': f"{level_data['emoji']} {level_data['title']}",
            'emoji': level_data['emoji'],
            'prestige': 0
        }

    def get_progress(self, user_id: str, guild_id: str) -> Dict:
        """Snapshot of a user's progress for rank cards."""
        record = self.store.get_or_create(user_id, guild_id)
        multiplier = self.get_active_multiplier(record)

        return {
            'level': record.level,
            'xp': record.xp,
            'xp_needed': xp_for_level(record.level + 1),
            'total_xp': record.total_xp,
            'weekly_xp': record.weekly_xp,
            'prestige': record.prestige,
            'messages': record.messages,
            'voice_minutes': record.voice_minutes,
            'multiplier': multiplier,
            'active_boosters': len(record.active_boosters),
            'can_prestige': record.level >= config.PRESTIGE_LEVEL,
        }

    def get_role_milestones(self) -> List[int]:
        return list(config.ROLE_MILESTONES)

    def get_config(self) -> Dict:
        """Copy of the leveling constants."""
        return {
            'xp_per_message': config.XP_PER_MESSAGE,
            'xp_random_bonus': config.XP_RANDOM_BONUS,
            'cooldown_ms': config.XP_COOLDOWN_MS,
            'xp_level_multiplier': config.XP_LEVEL_MULTIPLIER,
            'bonus_media_upload': config.BONUS_MEDIA_UPLOAD,
            'bonus_long_message': config.BONUS_LONG_MESSAGE,
            'bonus_voice_per_minute': config.BONUS_VOICE_PER_MINUTE,
            'daily_login_bonus': config.DAILY_LOGIN_BONUS,
            'daily_login_window_ms': config.DAILY_LOGIN_WINDOW_MS,
            'default_booster_duration_ms': config.DEFAULT_BOOSTER_DURATION_MS,
            'level_up_message': config.LEVEL_UP_MESSAGE,
            'prestige_level': config.PRESTIGE_LEVEL,
            'prestige_xp_retention': config.PRESTIGE_XP_RETENTION,
        }
