"""
============================================================================
LOGGING
============================================================================
Logging setup and command logging helpers.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import discord

import config

logger = logging.getLogger('saiyanbot.commands')

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = None, log_file: str = None):
    """Configure console and file logging from config."""
    handlers = []

    if config.LOG_TO_CONSOLE:
        handlers.append(logging.StreamHandler(sys.stdout))

    if config.LOG_TO_FILE:
        path = Path(log_file or config.LOG_FILE)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding='utf-8'))

    logging.basicConfig(
        level=(level or config.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )

    # discord.py is chatty at INFO
    logging.getLogger("discord").setLevel(logging.WARNING)


def _context(user: discord.abc.User, guild: Optional[discord.Guild]) -> str:
    where = f"guild={guild.id} ({guild.name})" if guild else "dm"
    return f"user={user.id} ({user}) {where}"


def log_command(name: str, user: discord.abc.User, guild: Optional[discord.Guild] = None):
    """Record a successful command execution."""
    logger.info(f"Command executed: {name} | {_context(user, guild)}")


def log_command_error(
    name: str,
    error: BaseException,
    user: discord.abc.User,
    guild: Optional[discord.Guild] = None
):
    """Record a failed command with its traceback."""
    logger.error(
        f"Command error: {name} | {_context(user, guild)} | {error}",
        exc_info=(type(error), error, error.__traceback__)
    )
