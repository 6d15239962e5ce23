"""
============================================================================
SAIYANBOT - Leveling & Fun Discord Bot
============================================================================
Community bot with:
- XP leveling with boosters, daily bonus and prestige
- All-time and weekly leaderboards
- Level-up announcements and milestone roles
- Canned fun commands (8ball, jokes, quotes, coinflip, dice)
- Per-server command prefix

Version: 1.0.0
License: MIT
"""

import discord
from discord.ext import commands, tasks
import logging
from typing import Dict, Optional

# Import configuration
import config

# Import storage
from database import Database, ProgressionStore, ProgressionStoreError

# Import modules
from modules.leveling import LevelingSystem, level_title
from modules.weekly_reset import reset_weekly_if_needed

# Import utilities
from utils.helpers import create_embed
from utils.logger import setup_logging, log_command_error

logger = logging.getLogger('saiyanbot')


async def get_prefix(bot: 'SaiyanBot', message: discord.Message):
    """Per-server prefix, default prefix in DMs."""
    if message.guild is None or bot.settings is None:
        return commands.when_mentioned_or(config.DEFAULT_PREFIX)(bot, message)
    prefix = await bot.settings.get_prefix(str(message.guild.id))
    return commands.when_mentioned_or(prefix)(bot, message)


# ============================================================================
# BOT SETUP
# ============================================================================

class SaiyanBot(commands.Bot):
    """
    Main bot class with custom initialization.
    """

    def __init__(self):
        intents = discord.Intents.default()
        intents.message_content = True  # Needed for prefix commands
        intents.members = True          # Needed for milestone roles
        intents.voice_states = True

        super().__init__(
            command_prefix=get_prefix,
            intents=intents,
            activity=discord.Game(name=config.ACTIVITY_NAME),
            help_command=None
        )

        # Set in setup_hook
        self.settings: Optional[Database] = None
        self.progression: Optional[ProgressionStore] = None
        self.leveling: Optional[LevelingSystem] = None

        # (guild_id, user_id) -> voice join time in ms
        self.voice_sessions: Dict[tuple, int] = {}

    async def setup_hook(self):
        """
        Called when bot is setting up.
        Initialize storage and modules here.
        """
        logger.info("🚀 Setting up SaiyanBot...")

        self.settings = Database()
        await self.settings.initialize()

        # One store and one engine for the whole process
        self.progression = ProgressionStore()
        await self.progression.initialize()
        await reset_weekly_if_needed(self.progression)
        self.leveling = LevelingSystem(self.progression)

        logger.info("✅ All modules initialized!")

        await self.load_extension('commands.leveling_commands')
        await self.load_extension('commands.fun_commands')
        logger.info("✅ Command cogs loaded!")

        if config.GUILD_ID:
            guild = discord.Object(id=int(config.GUILD_ID))
            self.tree.copy_global_to(guild=guild)
            synced = await self.tree.sync(guild=guild)
        else:
            synced = await self.tree.sync()
        logger.info(f"✅ {len(synced)} slash commands synced!")

        self.weekly_reset_check.start()

    async def on_ready(self):
        """
        Called when bot is fully ready and connected.
        """
        logger.info(f"✅ Bot logged in as {self.user} ({self.user.id})")
        logger.info(f"📊 Connected to {len(self.guilds)} server(s)")

    async def close(self):
        """
        Cleanup when bot shuts down.
        """
        logger.info("🛑 Shutting down...")

        if self.weekly_reset_check.is_running():
            self.weekly_reset_check.cancel()

        if self.settings:
            await self.settings.close()

        await super().close()

    # ========================================================================
    # BACKGROUND TASKS
    # ========================================================================

    @tasks.loop(minutes=config.WEEKLY_RESET_CHECK_MINUTES)
    async def weekly_reset_check(self):
        """Re-check the weekly leaderboard reset."""
        try:
            await reset_weekly_if_needed(self.progression)
        except ProgressionStoreError as e:
            logger.error(f"❌ Weekly reset could not be saved: {e}")

    # ========================================================================
    # EVENT HANDLERS
    # ========================================================================

    async def on_message(self, message: discord.Message):
        """
        Main message handler - XP, then prefix commands.
        """
        if config.IGNORE_BOTS and message.author.bot:
            return

        if message.guild is not None:
            try:
                result = await self.leveling.award_xp(
                    str(message.author.id),
                    str(message.guild.id),
                    has_media=bool(message.attachments),
                    is_long_message=len(message.content) >= config.LONG_MESSAGE_LENGTH
                )
            except ProgressionStoreError as e:
                logger.error(f"❌ XP for {message.author} could not be saved: {e}")
                result = None

            if result and 'new_level' in result:
                await self.handle_level_up(message.author, message.channel, result)

        await self.process_commands(message)

    async def on_voice_state_update(
        self,
        member: discord.Member,
        before: discord.VoiceState,
        after: discord.VoiceState
    ):
        """Track voice sessions and award XP when a member leaves voice."""
        if member.bot:
            return

        key = (member.guild.id, member.id)

        if before.channel is None and after.channel is not None:
            self.voice_sessions[key] = self.leveling.clock()
            return

        if before.channel is not None and after.channel is None:
            joined_at = self.voice_sessions.pop(key, None)
            if joined_at is None:
                return

            minutes = (self.leveling.clock() - joined_at) // 60_000
            if minutes < 1:
                return

            try:
                result = await self.leveling.award_xp(
                    str(member.id),
                    str(member.guild.id),
                    voice_minutes=minutes
                )
            except ProgressionStoreError as e:
                logger.error(f"❌ Voice XP for {member} could not be saved: {e}")
                return

            if result and 'new_level' in result:
                channel = member.guild.system_channel
                await self.handle_level_up(member, channel, result)

    async def handle_level_up(
        self,
        member: discord.Member,
        channel: Optional[discord.abc.Messageable],
        result: Dict
    ):
        """
        Announce a level up and grant milestone roles.
        """
        new_level = result['new_level']
        title = self.leveling.get_user_title(str(member.id), str(member.guild.id))

        if config.LEVEL_UP_MESSAGE and channel is not None:
            embed = create_embed(
                title="🎉 Level Up!",
                description=f"{member.mention} powered up to **level {new_level}**!\n{title['title']}",
                color=discord.Color.orange()
            )
            embed.add_field(name="Total XP", value=f"{result['total_xp']:,}", inline=True)
            embed.add_field(name="XP Gained", value=f"+{result['xp_gained']}", inline=True)
            if result['multiplier'] > 1:
                embed.add_field(name="Booster", value=f"{result['multiplier']:.2f}x", inline=True)
            if result['can_prestige']:
                embed.set_footer(text="✨ You can now prestige! Use /prestige")

            try:
                await channel.send(embed=embed)
            except discord.HTTPException as e:
                logger.warning(f"⚠️  Cannot announce level up in {channel}: {e}")

        # Grant every milestone passed in this jump
        for milestone in self.leveling.get_role_milestones():
            if result['old_level'] < milestone <= new_level:
                role_name = level_title(milestone)['title']
                role = discord.utils.get(member.guild.roles, name=role_name)
                if role is None or role in member.roles:
                    continue
                try:
                    await member.add_roles(role, reason=f"Reached level {milestone}")
                    logger.info(f"🏅 Gave {role_name} to {member}")
                except discord.Forbidden:
                    logger.warning(f"⚠️  Cannot assign role {role_name} (missing permissions)")

    async def on_guild_join(self, guild: discord.Guild):
        logger.info(f"Joined guild: {guild.name} (id={guild.id}, members={guild.member_count})")

    async def on_guild_remove(self, guild: discord.Guild):
        logger.info(f"Left guild: {guild.name} (id={guild.id})")
        await self.settings.remove_guild_settings(str(guild.id))

    async def on_command_error(self, ctx: commands.Context, error: commands.CommandError):
        """Fallback for prefix command errors not handled by a cog."""
        if isinstance(error, commands.CommandNotFound):
            return
        if ctx.cog is not None and ctx.cog.has_error_handler():
            return

        name = ctx.command.qualified_name if ctx.command else 'unknown'
        log_command_error(name, getattr(error, 'original', error), ctx.author, ctx.guild)
        try:
            await ctx.reply(config.ERROR_MESSAGES['generic'])
        except discord.HTTPException as e:
            logger.error(f"Failed to send error message: {e}")


# ============================================================================
# RUN BOT
# ============================================================================

def main():
    """Start the bot."""
    setup_logging()

    errors = config.validate_config()
    if errors:
        logger.warning("⚠️  Configuration Errors:")
        for error in errors:
            logger.warning(f"   ❌ {error}")
        if config.BOT_TOKEN == 'YOUR_BOT_TOKEN_HERE':
            return

    logger.info("🚀 STARTING SAIYANBOT")

    bot = SaiyanBot()
    try:
        bot.run(config.BOT_TOKEN, log_handler=None)
    except discord.LoginFailure:
        logger.error("❌ Invalid bot token! Please set DISCORD_TOKEN in your .env file")
    except Exception as e:
        logger.exception(f"❌ Error starting bot: {e}")
        raise


if __name__ == "__main__":
    main()
