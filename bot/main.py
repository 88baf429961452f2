"""Main bot entry point."""
import logging
import sys

import discord
from discord import app_commands
from discord.ext import commands

import config
from bot.cogs import admin, channels, lobby, lookup, replays, teams
from bot.listeners import buttons
from bot.models import init_db
from bot.services.announce import ensure_bot_channel
from bot.services.heroes_profile import HeroesProfileService
from bot.services.roster_store import RosterLoadError, RosterStore
from bot.services.teams import TeamSheet

logging.basicConfig(
    level=logging.DEBUG if config.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logging.getLogger("discord").setLevel(logging.INFO)
logger = logging.getLogger("norcustoms")

intents = discord.Intents.default()
intents.members = True  # Required to look up lobby players' voice state for /move_all_to_lobby
intents.voice_states = True


class NorCustomsBot(commands.Bot):
    """Nor Customs lobby bot."""

    def __init__(self):
        super().__init__(
            command_prefix="!",
            intents=intents,
            chunk_guilds_at_startup=True,
        )
        self.roster = RosterStore(config.ROSTER_PATH)
        self.roster_loaded = False
        self.teams = TeamSheet()
        self.hp_service = None

    async def on_ready(self) -> None:
        logger.info("Bot ready: %s (ID: %s)", self.user, self.user.id if self.user else "?")
        # Guild-specific sync: commands appear instantly instead of waiting for global propagation
        for guild in list(self.guilds):
            try:
                self.tree.copy_global_to(guild=guild)
                await self.tree.sync(guild=guild)
                logger.info("Commands synced to guild: %s (%s)", guild.name, guild.id)
            except discord.HTTPException as e:
                logger.warning("Failed to sync to guild %s: %s", guild.name, e)

    async def on_guild_join(self, guild: discord.Guild) -> None:
        logger.info("Joined guild: %s (%s)", guild.name, guild.id)
        await ensure_bot_channel(guild)

    async def setup_hook(self) -> None:
        """Setup before connecting. An unreadable roster snapshot aborts startup."""
        await init_db()
        self.roster.load()
        self.roster_loaded = True
        self.hp_service = HeroesProfileService()

        for module in (lobby, channels, teams, admin, lookup, replays):
            for command in module.COMMANDS:
                self.tree.add_command(command)

        await self.tree.sync()
        logger.info("Commands synced")

        # Global error handler: always respond so Discord doesn't show "application did not respond"
        async def on_app_command_error(interaction: discord.Interaction, error: app_commands.AppCommandError) -> None:
            msg = "Something went wrong. Check bot logs."
            if isinstance(error, app_commands.errors.CheckFailure):
                msg = "You do not have permission to use this command."
            else:
                logger.exception("Command error: %s", error)
            try:
                if interaction.response.is_done():
                    await interaction.followup.send(msg, ephemeral=True)
                else:
                    await interaction.response.send_message(msg, ephemeral=True)
            except discord.HTTPException:
                logger.warning("Could not report command error to user %s", interaction.user.id)

        self.tree.on_error = on_app_command_error

        buttons.setup(self)

    async def close(self) -> None:
        """Cleanup on shutdown."""
        if self.hp_service:
            await self.hp_service.close()
        # Never overwrite the snapshot with an empty roster after a failed load
        if self.roster_loaded:
            await self.roster.save_async()
        await super().close()


def main() -> None:
    """Run the bot."""
    if not config.DISCORD_TOKEN:
        raise ValueError("DISCORD_TOKEN is required")
    if not config.HEROES_PROFILE_API_TOKEN:
        logger.warning("HEROES_PROFILE_API_TOKEN not set - /lookup will fail")

    bot = NorCustomsBot()
    try:
        bot.run(config.DISCORD_TOKEN, log_handler=None)
    except RosterLoadError:
        logger.critical("Could not load the lobby roster - refusing to start", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
