"""Owner notifications and user-facing replies for unexpected bot errors."""

import logging
import traceback
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import discord
from discord import app_commands
from discord.ext import commands


logger = logging.getLogger(__name__)


class ErrorHandler:
    """Centralized error handling for the Avalon bot.

    Game-server failures never reach this class; they are turned into toasts by
    the client's services. What lands here is a bug or a Discord-side problem.
    """

    def __init__(self, bot: commands.Bot, owner_id: int, notification_cooldown: int = 300):
        self.bot = bot
        self.owner_id = owner_id
        self.error_counts: Dict[str, int] = {}
        self.last_notification: Dict[str, datetime] = {}
        self.notification_cooldown = notification_cooldown  # seconds between same error types

    async def _get_owner(self) -> Optional[discord.User]:
        if not self.owner_id:
            return None
        return self.bot.get_user(self.owner_id) or await self.bot.fetch_user(self.owner_id)

    async def notify_owner(self, title: str, description: str, error: Exception = None):
        """Send a DM notification to the bot owner."""
        try:
            owner = await self._get_owner()
            if owner is None:
                logger.info(f"No owner configured; skipping notification: {title}")
                return

            embed = discord.Embed(
                title=f"🚨 {title}",
                description=description,
                color=0xff0000,
                timestamp=datetime.now(timezone.utc)
            )

            if error:
                embed.add_field(name="Error Details", value=f"```{str(error)[:1000]}```", inline=False)
                tb = ''.join(traceback.format_exception(type(error), error, error.__traceback__))
                embed.add_field(name="Traceback", value=f"```{tb[-1000:]}```", inline=False)

            embed.set_footer(text="Avalon Bot Error Handler")
            await owner.send(embed=embed)
            logger.info(f"Sent error notification to owner: {title}")

        except discord.HTTPException as e:
            logger.error(f"Failed to send error notification: {e}")

    def should_notify(self, error_type: str, now: datetime = None) -> bool:
        """Count an error and decide whether the owner hears about it again."""
        now = now or datetime.now(timezone.utc)
        self.error_counts[error_type] = self.error_counts.get(error_type, 0) + 1

        last = self.last_notification.get(error_type)
        if last is not None and now - last <= timedelta(seconds=self.notification_cooldown):
            return False
        self.last_notification[error_type] = now
        return True

    def user_message(self, error: Exception) -> str:
        """What the player sees when a command blows up."""
        if isinstance(error, discord.NotFound) and "10062" in str(error):
            return "⏱️ The command took too long to process. Please try again."
        if isinstance(error, app_commands.CommandOnCooldown):
            return f"🕒 Command is on cooldown. Try again in {error.retry_after:.1f} seconds."
        if isinstance(error, app_commands.MissingPermissions):
            return "🔒 You don't have permission to use this command."
        return "An error occurred while processing your command. The bot owner has been notified."

    async def handle_interaction_error(self, interaction: discord.Interaction, error: Exception):
        """Handle slash command interaction errors."""
        error_type = type(error).__name__
        command_name = interaction.command.name if interaction.command else "unknown"
        logger.error(f"Interaction error in /{command_name}: {error}", exc_info=error)

        if self.should_notify(error_type):
            user = f"{interaction.user.display_name} ({interaction.user.id})"
            guild = f"{interaction.guild.name} ({interaction.guild.id})" if interaction.guild else "DM"
            description = (
                f"**Command:** /{command_name}\n"
                f"**User:** {user}\n"
                f"**Guild:** {guild}\n"
                f"**Error Count:** {self.error_counts[error_type]} (since restart)"
            )
            await self.notify_owner(f"Slash Command Error: {error_type}", description, error)

        error_embed = discord.Embed(title="❌ Command Error", description=self.user_message(error), color=0xff0000)
        try:
            if not interaction.response.is_done():
                await interaction.response.send_message(embed=error_embed, ephemeral=True)
            else:
                await interaction.followup.send(embed=error_embed, ephemeral=True)
        except discord.HTTPException as followup_error:
            logger.error(f"Failed to send error message to user: {followup_error}")

    async def send_startup_notification(self):
        """Send notification when bot starts successfully."""
        try:
            owner = await self._get_owner()
            if owner is None:
                return
            embed = discord.Embed(
                title="✅ Avalon Bot Started",
                description=f"Bot is online and ready in {len(self.bot.guilds)} guild(s)",
                color=0x00ff00,
                timestamp=datetime.now(timezone.utc)
            )
            await owner.send(embed=embed)
            logger.info("Sent startup notification to owner")
        except discord.HTTPException as e:
            logger.error(f"Failed to send startup notification: {e}")
