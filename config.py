"""
============================================================================
SAIYANBOT CONFIGURATION
============================================================================
Central configuration file for all bot settings.
Edit these values to customize bot behavior.

For security, store your bot token in a .env file:
DISCORD_TOKEN=your_token_here
GUILD_ID=optional_guild_for_fast_command_sync
"""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# ============================================================================
# BOT CREDENTIALS
# ============================================================================

BOT_TOKEN = os.getenv('DISCORD_TOKEN', 'YOUR_BOT_TOKEN_HERE')
GUILD_ID = os.getenv('GUILD_ID')  # Sync slash commands to one guild only

DEFAULT_PREFIX = '!'  # Prefix used in DMs and for new servers
IGNORE_BOTS = True
ACTIVITY_NAME = 'with ki blasts'

# ============================================================================
# STORAGE SETTINGS
# ============================================================================

LEVELS_FILE = os.getenv('LEVELS_FILE', 'data/user-levels.json')
DATABASE_PATH = os.getenv('DATABASE_PATH', 'data/saiyanbot.db')

# ============================================================================
# LEVELING SETTINGS
# ============================================================================

# XP rewards (all intervals are in milliseconds)
XP_PER_MESSAGE = 20
XP_RANDOM_BONUS = 15        # Adds randint in [0, XP_RANDOM_BONUS - 1]
XP_COOLDOWN_MS = 60_000     # Between XP awards in the same server
BONUS_MEDIA_UPLOAD = 25
BONUS_LONG_MESSAGE = 15
BONUS_VOICE_PER_MINUTE = 10
LONG_MESSAGE_LENGTH = 100   # Characters for a message to count as long

# Level curve: xp_for_level(n) = floor(n * XP_LEVEL_MULTIPLIER * (1 + n * 0.1))
XP_LEVEL_MULTIPLIER = 150

# Daily bonus
DAILY_LOGIN_BONUS = 100
DAILY_LOGIN_WINDOW_MS = 86_400_000  # 24 hours

# Boosters
DEFAULT_BOOSTER_DURATION_MS = 3_600_000  # 1 hour

# Prestige
PRESTIGE_LEVEL = 50
PRESTIGE_XP_RETENTION = 0.1  # Fraction of total XP kept on prestige

# Leaderboards
# Prestige outranks raw XP as long as nobody earns this much in one tier
PRESTIGE_RANK_WEIGHT = 1_000_000
LEADERBOARD_DEFAULT_LIMIT = 10
LEADERBOARD_MAX_LIMIT = 25

# Weekly leaderboard reset
WEEKLY_RESET_DAY = 6        # datetime.weekday(): Monday=0 ... Sunday=6
WEEK_MS = 604_800_000
WEEKLY_RESET_CHECK_MINUTES = 60

# Announcements
LEVEL_UP_MESSAGE = True

# Levels that grant a role named after the level title
ROLE_MILESTONES = [5, 10, 15, 20, 30, 50]

# ============================================================================
# FUN COMMAND SETTINGS
# ============================================================================

DICE_DEFAULT_SIDES = 6
DICE_MIN_SIDES = 2
DICE_MAX_SIDES = 100

# ============================================================================
# MESSAGES
# ============================================================================

ERROR_MESSAGES = {
    'generic': '❌ An error occurred while executing that command.',
    'permission_denied': "⛔ You don't have permission to use this command.",
    'cooldown': '⏱️ Please wait before using this command again.',
    'not_found': '❓ Command not found.',
    'guild_only': '❌ This command can only be used in a server.',
}

# ============================================================================
# LOGGING SETTINGS
# ============================================================================

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')  # DEBUG, INFO, WARNING, ERROR, CRITICAL
LOG_TO_CONSOLE = True
LOG_TO_FILE = True
LOG_FILE = os.getenv('LOG_FILE', 'data/bot.log')

# ============================================================================
# VALIDATION
# ============================================================================

def validate_config():
    """Validate configuration on startup"""
    errors = []

    if BOT_TOKEN == 'YOUR_BOT_TOKEN_HERE':
        errors.append("DISCORD_TOKEN not set! Please set it in .env file.")

    if XP_LEVEL_MULTIPLIER < 1:
        errors.append("XP_LEVEL_MULTIPLIER must be positive")

    if XP_RANDOM_BONUS < 1:
        errors.append("XP_RANDOM_BONUS must be at least 1")

    if not 0 < PRESTIGE_XP_RETENTION <= 1:
        errors.append("PRESTIGE_XP_RETENTION must be in (0, 1]")

    if not 0 <= WEEKLY_RESET_DAY <= 6:
        errors.append("WEEKLY_RESET_DAY must be a weekday number 0-6")

    return errors
