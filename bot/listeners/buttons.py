"""Button listener - routes lobby button presses through the same handlers as the slash commands."""
from __future__ import annotations

import logging

import discord
from discord.ext import commands

from bot import router
from bot.cogs.lobby import run_intent

logger = logging.getLogger("norcustoms.buttons")


async def _handle_button(interaction: discord.Interaction) -> None:
    """Run a lobby button press. Ids that aren't lobby buttons are left for other handlers."""
    if interaction.type != discord.InteractionType.component:
        return
    custom_id = (interaction.data or {}).get("custom_id")
    if not custom_id:
        return
    intent = router.parse_button(custom_id)
    try:
        await run_intent(interaction, intent)
    except Exception:
        # Slash commands get this from tree.on_error; buttons don't go through the tree
        logger.exception("Button %s failed for user %s", custom_id, interaction.user.id)
        msg = "Something went wrong. Check bot logs."
        try:
            if interaction.response.is_done():
                await interaction.followup.send(msg, ephemeral=True)
            else:
                await interaction.response.send_message(msg, ephemeral=True)
        except discord.HTTPException:
            logger.warning("Could not report button failure to user %s", interaction.user.id)


def setup(bot: commands.Bot) -> None:
    """Register the lobby button listener."""

    async def on_interaction(interaction: discord.Interaction) -> None:
        await _handle_button(interaction)

    bot.add_listener(on_interaction, "on_interaction")
