"""Main entry point for the Avalon Discord client."""

import os
import sys
import asyncio
import logging

import discord
from discord.ext import commands
from dotenv import load_dotenv

from error_handler import ErrorHandler

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
        logging.FileHandler('avalon_client.log')
    ]
)
logger = logging.getLogger(__name__)


def load_env():
    """Load environment variables; the bot token is required."""
    load_dotenv()

    token = os.getenv('DISCORD_TOKEN')
    if not token:
        logger.error("DISCORD_TOKEN is not set (add it to .env). Exiting.")
        sys.exit(1)
    return token


class AvalonBot(commands.Bot):
    """Discord front end for the Avalon game server."""

    def __init__(self):
        intents = discord.Intents.default()
        intents.message_content = False  # Slash commands only

        super().__init__(
            command_prefix='!',  # Unused but required
            intents=intents,
            description="Play Avalon: propose quests, vote, and watch the game unfold"
        )

        owner_id = int(os.getenv('BOT_OWNER_ID', '0'))
        self.error_handler = ErrorHandler(self, owner_id)

    async def setup_hook(self):
        """Load the command cog and sync slash commands."""
        logger.info("Setting up Avalon bot...")
        self.tree.error(self.on_app_command_error)

        try:
            await self.load_extension('avalon.commands')
            logger.info("Loaded Avalon commands")
        except Exception as e:
            await self.error_handler.notify_owner("Failed to load Avalon commands", str(e), e)
            logger.error(f"Failed to load Avalon commands: {e}")
            raise

        try:
            synced = await self.tree.sync()
            logger.info(f"Synced {len(synced)} command(s)")
        except discord.HTTPException as e:
            await self.error_handler.notify_owner("Failed to sync commands", str(e), e)
            logger.error(f"Failed to sync commands: {e}")

    async def on_ready(self):
        """Called when the bot is ready."""
        logger.info(f"Avalon bot is ready! Logged in as {self.user}")
        logger.info(f"Bot is in {len(self.guilds)} guild(s)")

        try:
            await self.change_presence(activity=discord.Game(name="Avalon | /avalon_create"))
            await self.error_handler.send_startup_notification()
        except discord.HTTPException as e:
            logger.error(f"Error in on_ready: {e}")

    async def on_app_command_error(self, interaction, error):
        """Handle application command errors."""
        await self.error_handler.handle_interaction_error(interaction, error)

    async def on_error(self, event, *args, **kwargs):
        """Handle general bot errors."""
        exc_type, exc_value, exc_traceback = sys.exc_info()
        logger.error(f"Bot error in event {event}", exc_info=True)
        if exc_value:
            context = {"event": event, "args": str(args)[:500]}
            await self.error_handler.notify_owner(f"Bot Error in {event}", str(context), exc_value)

    async def close(self):
        """Clean shutdown."""
        logger.info("Shutting down Avalon bot...")
        await self.error_handler.notify_owner("Bot Shutdown", "Avalon bot is shutting down normally")
        await super().close()


async def main():
    """Main function to run the bot."""
    token = load_env()
    bot = AvalonBot()
    try:
        await bot.start(token)
    finally:
        if not bot.is_closed():
            await bot.close()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)
