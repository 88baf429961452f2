"""Lookup cog - /lookup a battle tag's Heroes Profile MMR and save it to the account."""
from __future__ import annotations

import logging
from typing import Optional

import discord
from discord import app_commands

import config
from bot.models import get_async_session
from bot.services.discord_embeds import build_lookup_embed
from bot.services.heroes_profile import (
    BATTLE_TAG_RULES,
    HeroesProfileError,
    upsert_account,
    validate_battle_tag,
)

logger = logging.getLogger("norcustoms.lookup")

REGION_CHOICES = [
    app_commands.Choice(name="Americas", value=1),
    app_commands.Choice(name="Europe", value=2),
    app_commands.Choice(name="Asia", value=3),
    app_commands.Choice(name="China", value=5),
]


@app_commands.command(description="Look up Heroes Profile MMR for a battle tag")
@app_commands.describe(
    battle_tag="Battle tag including the # and number (e.g. Name#1234)",
    user="Link the battle tag to this member (default: nobody)",
    region="Heroes Profile region (default: Americas)",
)
@app_commands.choices(region=REGION_CHOICES)
async def lookup(
    interaction: discord.Interaction,
    battle_tag: str,
    user: Optional[discord.Member] = None,
    region: Optional[app_commands.Choice[int]] = None,
) -> None:
    """Validate, fetch, store and show. Stored MMR is overwritten by newer lookups."""
    battle_tag = battle_tag.strip()
    errors = validate_battle_tag(battle_tag)
    if errors:
        await interaction.response.send_message(
            f"You must provide a valid Heroes of the Storm battle tag in the format `Name#1234`.\n"
            f"You provided: `{battle_tag}`\n" + "\n".join(f"❌ {e}" for e in errors) + "\n" + BATTLE_TAG_RULES,
            ephemeral=True,
        )
        return

    await interaction.response.defer(ephemeral=True)
    region_id = region.value if region else config.HEROES_PROFILE_REGION
    try:
        data = await interaction.client.hp_service.get_mmr(battle_tag, region_id)
    except HeroesProfileError as e:
        logger.warning("Lookup of %s failed: %s", battle_tag, e)
        await interaction.followup.send(
            f"Heroes Profile data unavailable for **{battle_tag}**. Try again later.", ephemeral=True
        )
        return

    if data is None:
        await interaction.followup.send(
            f"Could not find **{battle_tag}** on Heroes Profile. Check the spelling and region.",
            ephemeral=True,
        )
        return

    async for session in get_async_session():
        await upsert_account(session, data, discord_id=user.id if user else None)
        break

    await interaction.followup.send(embed=build_lookup_embed(data, user), ephemeral=True)


COMMANDS = (lookup,)
