"""
============================================================================
UTILITY HELPERS
============================================================================
Common helper functions used throughout the bot.
"""

import discord
from datetime import datetime


def format_timespan(seconds: int) -> str:
    """
    Format seconds into human-readable timespan.

    Args:
        seconds: Number of seconds

    Returns:
        Formatted string (e.g., "2h 30m", "45s")
    """
    if seconds < 60:
        return f"{seconds}s"
    elif seconds < 3600:
        mins = seconds // 60
        secs = seconds % 60
        return f"{mins}m {secs}s" if secs else f"{mins}m"
    elif seconds < 86400:
        hours = seconds // 3600
        mins = (seconds % 3600) // 60
        return f"{hours}h {mins}m" if mins else f"{hours}h"
    else:
        days = seconds // 86400
        hours = (seconds % 86400) // 3600
        return f"{days}d {hours}h" if hours else f"{days}d"


def format_ms(milliseconds: int) -> str:
    """Timespan for a millisecond duration, rounded up to whole seconds."""
    return format_timespan(-(-milliseconds // 1000))


def create_progress_bar(current: int, maximum: int, length: int = 10) -> str:
    """
    Create a text progress bar.

    Args:
        current: Current value
        maximum: Maximum value
        length: Bar length in characters

    Returns:
        Progress bar string (e.g., "█████░░░░░ 50%")
    """
    if maximum == 0:
        return "░" * length + " 0%"

    percentage = min(100, (current / maximum) * 100)
    filled = int((percentage / 100) * length)
    empty = length - filled

    bar = "█" * filled + "░" * empty
    return f"{bar} {percentage:.0f}%"


def create_embed(
    title: str,
    description: str = None,
    color: discord.Color = None
) -> discord.Embed:
    """
    Create a standardized embed.

    Args:
        title: Embed title
        description: Embed description
        color: Embed color (blue by default)

    Returns:
        Discord Embed object
    """
    return discord.Embed(
        title=title,
        description=description,
        color=color or discord.Color.blue(),
        timestamp=datetime.now()
    )


def is_admin(member: discord.Member) -> bool:
    """True if the member has the Administrator permission."""
    return member.guild_permissions.administrator


def rank_medal(position: int) -> str:
    """Medal for the top three, '#n' otherwise."""
    return {1: '🥇', 2: '🥈', 3: '🥉'}.get(position, f"#{position}")
