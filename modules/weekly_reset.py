"""
============================================================================
WEEKLY RESET
============================================================================
Zeroes every record's weekly XP once per week.

There is no timer of its own: the reset fires only when something checks
(startup, weekly leaderboard queries, the bot's hourly task). A check resets
when it runs on the reset weekday and at least one full week has passed
since the last reset. If nothing checks during that day, the reset waits
for the next reset weekday.
"""

import logging
from datetime import datetime

import config
from database.progression_store import ProgressionStore

logger = logging.getLogger(__name__)


def should_reset(now_ms: int, last_reset_ms: int) -> bool:
    """Reset weekday (local time) and a full week since the last reset."""
    weekday = datetime.fromtimestamp(now_ms / 1000).weekday()
    return weekday == config.WEEKLY_RESET_DAY and now_ms - last_reset_ms >= config.WEEK_MS


async def reset_weekly_if_needed(store: ProgressionStore, now_ms: int = None) -> bool:
    """
    Run the weekly reset check against the store.

    Returns:
        True if weekly XP was reset
    """
    if now_ms is None:
        now_ms = store.clock()

    if not should_reset(now_ms, store.last_weekly_reset):
        return False

    records = store.records()
    for record in records:
        record.weekly_xp = 0
    store.last_weekly_reset = now_ms
    await store.persist()

    logger.info(f"🔄 Weekly XP reset for {len(records)} records")
    return True
