"""
============================================================================
FUN & UTILITY COMMANDS
============================================================================
Canned-response commands available both as prefix and slash commands
(8ball, joke, quote, coinflip, dice), plus:
- ping (prefix)
- hello (slash)
- setprefix (prefix, admins only)
"""

import random
import discord
from discord import app_commands
from discord.ext import commands
from typing import Optional

import config
from database import Database
from modules import responses
from utils.helpers import is_admin
from utils.logger import log_command, log_command_error


class FunCommands(commands.Cog):
    """Canned responses and server prefix management."""

    def __init__(self, bot: commands.Bot, settings: Database, rng: random.Random = None):
        self.bot = bot
        self.settings = settings
        self.rng = rng or random.Random()

    async def cog_command_error(self, ctx: commands.Context, error: commands.CommandError):
        name = ctx.command.qualified_name if ctx.command else 'unknown'

        if isinstance(error, commands.MissingRequiredArgument):
            await ctx.reply(f"❓ Missing `{error.param.name}`. Usage: `{ctx.clean_prefix}{name} <{error.param.name}>`")
            return
        if isinstance(error, commands.NoPrivateMessage):
            await ctx.reply(config.ERROR_MESSAGES['guild_only'])
            return

        log_command_error(name, getattr(error, 'original', error), ctx.author, ctx.guild)
        try:
            await ctx.reply(config.ERROR_MESSAGES['generic'], ephemeral=True)
        except discord.HTTPException as e:
            log_command_error(name, e, ctx.author, ctx.guild)

    async def cog_app_command_error(
        self,
        interaction: discord.Interaction,
        error: app_commands.AppCommandError
    ):
        name = interaction.command.name if interaction.command else 'unknown'
        log_command_error(name, getattr(error, 'original', error), interaction.user, interaction.guild)

        try:
            if interaction.response.is_done():
                await interaction.followup.send(config.ERROR_MESSAGES['generic'], ephemeral=True)
            else:
                await interaction.response.send_message(config.ERROR_MESSAGES['generic'], ephemeral=True)
        except discord.HTTPException as e:
            log_command_error(name, e, interaction.user, interaction.guild)

    # ========================================================================
    # BASIC COMMANDS
    # ========================================================================

    @commands.command(name="ping")
    async def ping_command(self, ctx: commands.Context):
        await ctx.reply('Pong! 🏓')
        log_command('ping', ctx.author, ctx.guild)

    @app_commands.command(name="hello", description="Replies with a friendly greeting")
    async def hello_command(self, interaction: discord.Interaction):
        await interaction.response.send_message('Hey there! 👋')
        log_command('hello', interaction.user, interaction.guild)

    @commands.command(name="setprefix")
    @commands.guild_only()
    async def setprefix_command(self, ctx: commands.Context, new_prefix: Optional[str] = None):
        """Change this server's command prefix (admins only)."""
        if not is_admin(ctx.author):
            await ctx.reply(config.ERROR_MESSAGES['permission_denied'])
            return

        if not new_prefix:
            current = await self.settings.get_prefix(str(ctx.guild.id))
            await ctx.reply(f"Current prefix: `{current}`\nUsage: {current}setprefix <new_prefix>")
            return

        await self.settings.set_guild_setting(str(ctx.guild.id), 'prefix', new_prefix)
        await ctx.reply(f"✅ Prefix updated to `{new_prefix}`")
        log_command('setprefix', ctx.author, ctx.guild)

    # ========================================================================
    # FUN COMMANDS
    # ========================================================================

    @commands.hybrid_command(name="8ball", description="Ask the magic 8-ball a question")
    @app_commands.describe(question="Your question for the 8-ball")
    async def eight_ball_command(self, ctx: commands.Context, *, question: str):
        await ctx.reply(responses.eight_ball(question, self.rng))
        log_command('8ball', ctx.author, ctx.guild)

    @commands.hybrid_command(name="joke", description="Get a random programming joke")
    async def joke_command(self, ctx: commands.Context):
        await ctx.reply(responses.joke(self.rng))
        log_command('joke', ctx.author, ctx.guild)

    @commands.hybrid_command(name="quote", description="Get an inspiring quote")
    async def quote_command(self, ctx: commands.Context):
        await ctx.reply(responses.quote(self.rng))
        log_command('quote', ctx.author, ctx.guild)

    @commands.hybrid_command(name="coinflip", aliases=["flip"], description="Flip a coin (heads or tails)")
    async def coinflip_command(self, ctx: commands.Context):
        await ctx.reply(responses.coinflip(self.rng))
        log_command('coinflip', ctx.author, ctx.guild)

    @commands.hybrid_command(name="dice", aliases=["roll"], description="Roll a dice")
    @app_commands.describe(sides="Number of sides on the dice (default: 6, max: 100)")
    async def dice_command(self, ctx: commands.Context, sides: Optional[int] = None):
        sides = sides or config.DICE_DEFAULT_SIDES
        if not responses.valid_dice_sides(sides):
            await ctx.reply(
                f"🎲 Please specify a number between {config.DICE_MIN_SIDES} and {config.DICE_MAX_SIDES}!"
            )
            return

        await ctx.reply(responses.roll_dice(sides, self.rng))
        log_command('dice', ctx.author, ctx.guild)


async def setup(bot):
    """Load the cog."""
    await bot.add_cog(FunCommands(bot, bot.settings))
