"""
SaiyanBot Core Modules
"""

from .leveling import LevelingSystem, level_from_total_xp, xp_for_level
from .leaderboard import get_leaderboard, get_user_rank
from .weekly_reset import reset_weekly_if_needed

__all__ = [
    'LevelingSystem', 'level_from_total_xp', 'xp_for_level',
    'get_leaderboard', 'get_user_rank',
    'reset_weekly_if_needed',
]
