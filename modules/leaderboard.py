"""
============================================================================
LEADERBOARD
============================================================================
Read-only ranking queries over the progression ledger.

All-time ranking sorts by prestige first and total XP second, folded into
one score: prestige * PRESTIGE_RANK_WEIGHT + total_xp. This only holds while
no one earns PRESTIGE_RANK_WEIGHT XP within a single prestige tier.
Weekly ranking sorts by weekly XP. Sorting is stable, so ties keep the
ledger's insertion order.
"""

from typing import List, Optional

import config
from database.progression_store import ProgressionRecord, ProgressionStore


def rank_score(record: ProgressionRecord, weekly: bool = False) -> int:
    """Sort key for a record on the all-time or weekly board."""
    if weekly:
        return record.weekly_xp
    return record.prestige * config.PRESTIGE_RANK_WEIGHT + record.total_xp


def get_leaderboard(
    store: ProgressionStore,
    guild_id: str,
    limit: Optional[int] = 10,
    weekly: bool = False
) -> List[ProgressionRecord]:
    """
    Top records for a guild.

    Args:
        store: Progression ledger
        guild_id: Guild to rank
        limit: Maximum entries (None for the whole guild)
        weekly: Rank by weekly XP instead of all-time score

    Returns:
        Records ordered best first
    """
    ranked = sorted(
        store.records(guild_id),
        key=lambda record: rank_score(record, weekly),
        reverse=True
    )
    if limit is None:
        return ranked
    return ranked[:max(limit, 0)]


def get_user_rank(
    store: ProgressionStore,
    user_id: str,
    guild_id: str,
    weekly: bool = False
) -> Optional[int]:
    """1-based position of a user on the guild board, or None if absent."""
    for position, record in enumerate(get_leaderboard(store, guild_id, None, weekly), start=1):
        if record.user_id == str(user_id):
            return position
    return None
