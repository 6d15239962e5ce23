"""
============================================================================
LEVELING COMMANDS
============================================================================
Slash commands for the leveling system:
- Rank cards with level progress and titles
- All-time and weekly leaderboards
- Daily bonus
- Prestige with confirmation
- XP boosters (admins)

All commands use the bot's single LevelingSystem instance.
"""

import discord
from discord import app_commands
from discord.ext import commands
from typing import Optional

import config
from database import ProgressionStoreError
from modules.leveling import LevelingSystem, level_title, prestige_title
from modules.leaderboard import get_leaderboard, get_user_rank
from modules.weekly_reset import reset_weekly_if_needed
from utils.helpers import create_embed, create_progress_bar, format_ms, rank_medal
from utils.logger import log_command, log_command_error


class LevelingCommands(commands.Cog):
    """XP, rank, leaderboard, daily bonus and prestige commands."""

    def __init__(self, bot: commands.Bot, leveling: LevelingSystem):
        self.bot = bot
        self.leveling = leveling
        self.store = leveling.store

    async def cog_app_command_error(
        self,
        interaction: discord.Interaction,
        error: app_commands.AppCommandError
    ):
        name = interaction.command.name if interaction.command else 'unknown'
        log_command_error(name, getattr(error, 'original', error), interaction.user, interaction.guild)

        message = config.ERROR_MESSAGES['generic']
        if isinstance(error, app_commands.MissingPermissions):
            message = config.ERROR_MESSAGES['permission_denied']

        try:
            if interaction.response.is_done():
                await interaction.followup.send(message, ephemeral=True)
            else:
                await interaction.response.send_message(message, ephemeral=True)
        except discord.HTTPException as e:
            log_command_error(name, e, interaction.user, interaction.guild)

    # ========================================================================
    # RANK
    # ========================================================================

    @app_commands.command(name="rank", description="Check your level, XP progress and rank")
    @app_commands.describe(user="User to check (defaults to you)")
    @app_commands.guild_only()
    async def rank_command(
        self,
        interaction: discord.Interaction,
        user: Optional[discord.Member] = None
    ):
        target = user or interaction.user
        user_id = str(target.id)
        guild_id = str(interaction.guild.id)

        await reset_weekly_if_needed(self.store)

        progress = self.leveling.get_progress(user_id, guild_id)
        title = self.leveling.get_user_title(user_id, guild_id)
        rank = get_user_rank(self.store, user_id, guild_id)
        weekly_rank = get_user_rank(self.store, user_id, guild_id, weekly=True)

        embed = create_embed(
            title=f"{title['emoji']} {target.display_name}",
            description=f"**{title['title']}**",
            color=discord.Color.gold() if progress['prestige'] else discord.Color.blue()
        )
        embed.set_thumbnail(url=target.display_avatar.url)

        embed.add_field(name="Level", value=str(progress['level']), inline=True)
        embed.add_field(name="Rank", value=f"#{rank}" if rank else "Unranked", inline=True)
        embed.add_field(name="Prestige", value=str(progress['prestige']), inline=True)

        embed.add_field(
            name="Progress",
            value=f"{create_progress_bar(progress['xp'], progress['xp_needed'])}\n"
                  f"{progress['xp']:,}/{progress['xp_needed']:,} XP",
            inline=False
        )
        embed.add_field(name="Total XP", value=f"{progress['total_xp']:,}", inline=True)
        embed.add_field(
            name="Weekly XP",
            value=f"{progress['weekly_xp']:,} (#{weekly_rank})" if weekly_rank else f"{progress['weekly_xp']:,}",
            inline=True
        )
        embed.add_field(name="Messages", value=f"{progress['messages']:,}", inline=True)

        if progress['active_boosters']:
            embed.add_field(
                name="⚡ Boosters",
                value=f"{progress['active_boosters']} active ({progress['multiplier']:.2f}x XP)",
                inline=False
            )

        if progress['can_prestige']:
            embed.set_footer(text="✨ Prestige available! Use /prestige")

        await interaction.response.send_message(embed=embed)
        log_command('rank', interaction.user, interaction.guild)

    # ========================================================================
    # LEADERBOARD
    # ========================================================================

    @app_commands.command(name="leaderboard", description="View the server XP leaderboard")
    @app_commands.describe(
        weekly="Show this week's leaderboard instead of all-time",
        limit="Number of users to show (default 10)"
    )
    @app_commands.guild_only()
    async def leaderboard_command(
        self,
        interaction: discord.Interaction,
        weekly: bool = False,
        limit: Optional[app_commands.Range[int, 1, config.LEADERBOARD_MAX_LIMIT]] = None
    ):
        guild_id = str(interaction.guild.id)
        limit = limit or config.LEADERBOARD_DEFAULT_LIMIT

        if weekly:
            await reset_weekly_if_needed(self.store)

        entries = get_leaderboard(self.store, guild_id, limit, weekly)

        embed = create_embed(
            title="📅 Weekly Leaderboard" if weekly else "🏆 Power Level Leaderboard",
            description=f"Top {len(entries)} warriors in {interaction.guild.name}"
        )

        if not entries:
            embed.add_field(name="No Data", value="Nobody has earned XP yet!", inline=False)
        else:
            lines = []
            for position, record in enumerate(entries, start=1):
                member = interaction.guild.get_member(int(record.user_id))
                name = member.display_name if member else f"User {record.user_id}"
                if weekly:
                    stats = f"{record.weekly_xp:,} XP this week"
                else:
                    stats = f"Level {record.level} • {record.total_xp:,} XP"
                    if record.prestige:
                        stats = f"{prestige_title(record.prestige)['emoji']} P{record.prestige} • {stats}"
                lines.append(f"{rank_medal(position)} **{name}** - {stats}")
            embed.description += "\n\n" + "\n".join(lines)

        rank = get_user_rank(self.store, str(interaction.user.id), guild_id, weekly)
        if rank:
            embed.set_footer(text=f"Your rank: #{rank}")

        await interaction.response.send_message(embed=embed)
        log_command('leaderboard', interaction.user, interaction.guild)

    # ========================================================================
    # DAILY BONUS
    # ========================================================================

    @app_commands.command(name="daily", description="Claim your daily XP bonus")
    @app_commands.guild_only()
    async def daily_command(self, interaction: discord.Interaction):
        result = await self.leveling.claim_daily_bonus(
            str(interaction.user.id),
            str(interaction.guild.id)
        )

        if not result['claimed']:
            await interaction.response.send_message(
                f"⏳ You already claimed your daily bonus! "
                f"Come back in **{format_ms(result['time_left'])}**.",
                ephemeral=True
            )
            return

        embed = create_embed(
            title="🎁 Daily Bonus Claimed!",
            description=f"You gained **{result['xp_gained']} XP**!",
            color=discord.Color.green()
        )
        if result['leveled_up']:
            data = level_title(result['new_level'])
            embed.add_field(
                name="🎉 Level Up!",
                value=f"You reached **level {result['new_level']}** - {data['emoji']} {data['title']}",
                inline=False
            )

        await interaction.response.send_message(embed=embed)
        log_command('daily', interaction.user, interaction.guild)

    # ========================================================================
    # PRESTIGE SYSTEM
    # ========================================================================

    @app_commands.command(
        name="prestige",
        description=f"Reset your level for a prestige rank (requires level {config.PRESTIGE_LEVEL}+)"
    )
    @app_commands.guild_only()
    async def prestige_command(self, interaction: discord.Interaction):
        user_id = str(interaction.user.id)
        guild_id = str(interaction.guild.id)
        progress = self.leveling.get_progress(user_id, guild_id)

        if not progress['can_prestige']:
            await interaction.response.send_message(
                f"❌ You need level {config.PRESTIGE_LEVEL}+ to prestige!\n"
                f"Current level: {progress['level']}",
                ephemeral=True
            )
            return

        retention = int(config.PRESTIGE_XP_RETENTION * 100)
        next_title = prestige_title(progress['prestige'] + 1)

        embed = create_embed(
            title="✨ Prestige Confirmation",
            description=f"Are you sure you want to prestige?\n\n"
                       f"**Current Status:**\n"
                       f"└ Level: {progress['level']}\n"
                       f"└ Prestige: {progress['prestige']}\n"
                       f"└ Total XP: {progress['total_xp']:,}\n\n"
                       f"**After Prestige:**\n"
                       f"└ Prestige: {progress['prestige'] + 1} - {next_title['emoji']} {next_title['title']}\n"
                       f"└ Total XP: {int(progress['total_xp'] * config.PRESTIGE_XP_RETENTION):,} "
                       f"({retention}% kept)\n"
                       f"└ Weekly XP: 0\n\n"
                       f"⚠️ Your level will be recalculated from the XP you keep!"
        )

        view = PrestigeConfirmView(user_id, guild_id, self.leveling)
        await interaction.response.send_message(embed=embed, view=view)

    @app_commands.command(name="prestige-info", description="View prestige system information")
    @app_commands.guild_only()
    async def prestige_info_command(self, interaction: discord.Interaction):
        retention = int(config.PRESTIGE_XP_RETENTION * 100)
        progress = self.leveling.get_progress(str(interaction.user.id), str(interaction.guild.id))

        embed = create_embed(
            title="✨ Prestige System",
            description=f"Reach level {config.PRESTIGE_LEVEL} to ascend to the next prestige rank!\n\n"
                       f"**How It Works:**\n"
                       f"• Reach level {config.PRESTIGE_LEVEL}+\n"
                       f"• Use `/prestige` to ascend\n"
                       f"• Keep {retention}% of your total XP\n"
                       f"• Weekly XP resets to 0\n"
                       f"• Prestige always ranks above raw XP on the leaderboard"
        )

        embed.add_field(
            name="Your Status",
            value=f"**Level:** {progress['level']}\n**Prestige:** {progress['prestige']}",
            inline=False
        )

        if progress['can_prestige']:
            embed.add_field(name="✅ Prestige Available!", value="You can prestige now with `/prestige`", inline=False)
        else:
            needed = config.PRESTIGE_LEVEL - progress['level']
            embed.add_field(name="Next Prestige", value=f"{needed} more levels to go!", inline=False)

        await interaction.response.send_message(embed=embed)
        log_command('prestige-info', interaction.user, interaction.guild)

    # ========================================================================
    # BOOSTERS
    # ========================================================================

    @app_commands.command(name="boost", description="Give a member a temporary XP booster")
    @app_commands.describe(
        user="Member to boost",
        multiplier="Bonus on top of 1.0x (0.5 = +50% XP)",
        minutes="Booster duration in minutes (default 60)"
    )
    @app_commands.guild_only()
    @app_commands.default_permissions(administrator=True)
    @app_commands.checks.has_permissions(administrator=True)
    async def boost_command(
        self,
        interaction: discord.Interaction,
        user: discord.Member,
        multiplier: app_commands.Range[float, 0.1, 10.0],
        minutes: Optional[app_commands.Range[int, 1, 10080]] = None
    ):
        duration_ms = minutes * 60_000 if minutes else None
        booster = await self.leveling.add_booster(
            str(user.id),
            str(interaction.guild.id),
            multiplier,
            duration_ms
        )

        await interaction.response.send_message(
            f"⚡ {user.mention} received a **+{multiplier:g}x** XP booster "
            f"until <t:{booster.expires_at // 1000}:t>!"
        )
        log_command('boost', interaction.user, interaction.guild)


# ============================================================================
# PRESTIGE CONFIRMATION VIEW
# ============================================================================

class PrestigeConfirmView(discord.ui.View):
    """Confirmation buttons for prestige."""

    def __init__(self, user_id: str, guild_id: str, leveling: LevelingSystem):
        super().__init__(timeout=60)
        self.user_id = user_id
        self.guild_id = guild_id
        self.leveling = leveling

    @discord.ui.button(label="Confirm Prestige", style=discord.ButtonStyle.danger, emoji="✨")
    async def confirm_button(self, interaction: discord.Interaction, button: discord.ui.Button):
        """Confirm and execute prestige."""
        if str(interaction.user.id) != self.user_id:
            await interaction.response.send_message("❌ This isn't your prestige confirmation!", ephemeral=True)
            return

        await interaction.response.defer()

        # Disable buttons
        for item in self.children:
            item.disabled = True

        try:
            result = await self.leveling.prestige(self.user_id, self.guild_id)
        except ProgressionStoreError as e:
            log_command_error('prestige', e, interaction.user, interaction.guild)
            await interaction.edit_original_response(
                content=config.ERROR_MESSAGES['generic'],
                embed=None,
                view=self
            )
            return

        if not result['success']:
            await interaction.edit_original_response(
                content=f"❌ Prestige failed: {result['reason']}",
                embed=None,
                view=self
            )
            return

        title = self.leveling.get_user_title(self.user_id, self.guild_id)
        embed = create_embed(
            title="🌟 PRESTIGE ACHIEVED!",
            description=f"{interaction.user.mention} has ascended!\n\n"
                       f"**New Status:**\n"
                       f"└ Prestige: {result['old_prestige']} → **{result['new_prestige']}**\n"
                       f"└ Title: {title['title']}\n"
                       f"└ XP kept: **{result['retained_xp']:,}**\n"
                       f"└ Level: **{result['new_level']}**",
            color=discord.Color.gold()
        )

        await interaction.edit_original_response(embed=embed, view=self)
        log_command('prestige', interaction.user, interaction.guild)

    @discord.ui.button(label="Cancel", style=discord.ButtonStyle.secondary)
    async def cancel_button(self, interaction: discord.Interaction, button: discord.ui.Button):
        """Cancel prestige."""
        if str(interaction.user.id) != self.user_id:
            await interaction.response.send_message("❌ This isn't your prestige confirmation!", ephemeral=True)
            return

        # Disable buttons
        for item in self.children:
            item.disabled = True

        await interaction.response.edit_message(
            content="❌ Prestige cancelled.",
            view=self
        )


async def setup(bot):
    """Load the cog."""
    await bot.add_cog(LevelingCommands(bot, bot.leveling))
