"""Tests for the Heroes Profile service."""
from unittest.mock import AsyncMock, patch

import aiohttp
import pytest
from sqlalchemy import select

from bot.models import hots_accounts
from bot.services.heroes_profile import (
    HeroesProfileError,
    HeroesProfileService,
    HPData,
    parse_mmr_payload,
    upsert_account,
    validate_battle_tag,
)

PAYLOAD = {
    "Alice#1234": {
        "Quick Match": {"mmr": 2650, "games_played": 310},
        "Storm League": {"mmr": "2400.6", "games_played": 45},
    }
}


@pytest.mark.parametrize("tag", ["Alice#1234", "ZeRgRuSh#12345", "Ülrich#0001"])
def test_valid_battle_tags(tag):
    assert validate_battle_tag(tag) == []


@pytest.mark.parametrize(
    "tag, problem",
    [
        ("Alice", "Missing #"),
        ("Al#1234", "3-12 characters"),
        ("ThisNameIsTooLong#1234", "3-12 characters"),
        ("1Alice#1234", "cannot start with a number"),
        ("Al ice#1234", "invalid symbols"),
        ("Alice#123", "at least 4 digits"),
        ("Alice#12a34", "Only digits"),
    ],
)
def test_invalid_battle_tags(tag, problem):
    errors = validate_battle_tag(tag)
    assert any(problem in e for e in errors), errors


def test_parse_mmr_payload():
    data = parse_mmr_payload("alice#1234", 1, PAYLOAD)
    assert data.qm_mmr == 2650
    assert data.qm_games == 310
    assert data.sl_mmr == 2400
    assert data.ar_mmr is None
    assert data.url == "https://www.heroesprofile.com/Player/alice/1234/1"


def test_parse_empty_payload():
    assert parse_mmr_payload("Alice#1234", 1, {}) is None
    assert parse_mmr_payload("Alice#1234", 1, []) is None


@pytest.mark.asyncio
async def test_get_mmr_success_is_cached():
    service = HeroesProfileService(api_url="http://hp.test", token="t")
    service._request = AsyncMock(return_value=(200, PAYLOAD))
    first = await service.get_mmr("Alice#1234", 1)
    second = await service.get_mmr("Alice#1234", 1)
    assert first is second
    assert first.qm_mmr == 2650
    service._request.assert_awaited_once()


@pytest.mark.asyncio
async def test_get_mmr_not_found():
    service = HeroesProfileService(api_url="http://hp.test", token="t")
    service._request = AsyncMock(return_value=(404, None))
    assert await service.get_mmr("Alice#1234", 1) is None


@pytest.mark.asyncio
async def test_unauthorized_refreshes_token_and_retries_once():
    service = HeroesProfileService(api_url="http://hp.test", token="old")
    service._request = AsyncMock(side_effect=[(401, None), (200, PAYLOAD)])
    with patch("config.reload_heroes_profile_token", return_value="new") as reload:
        data = await service.get_mmr("Alice#1234", 1)
    reload.assert_called_once()
    assert service._request.await_count == 2
    assert service._token == "new"
    assert data.qm_mmr == 2650


@pytest.mark.asyncio
async def test_second_unauthorized_raises():
    service = HeroesProfileService(api_url="http://hp.test", token="old")
    service._request = AsyncMock(side_effect=[(401, None), (403, None)])
    with patch("config.reload_heroes_profile_token", return_value="still-bad"):
        with pytest.raises(HeroesProfileError):
            await service.get_mmr("Alice#1234", 1)
    assert service._request.await_count == 2


@pytest.mark.asyncio
async def test_server_error_raises():
    service = HeroesProfileService(api_url="http://hp.test", token="t")
    service._request = AsyncMock(return_value=(500, None))
    with pytest.raises(HeroesProfileError):
        await service.get_mmr("Alice#1234", 1)


@pytest.mark.asyncio
async def test_network_error_raises():
    service = HeroesProfileService(api_url="http://hp.test", token="t")
    service._request = AsyncMock(side_effect=aiohttp.ClientConnectionError("down"))
    with pytest.raises(HeroesProfileError):
        await service.get_mmr("Alice#1234", 1)


@pytest.mark.asyncio
async def test_upsert_account_inserts_then_updates(session):
    data = HPData(battle_tag="Alice#1234", region=1, url="u", qm_mmr=2000, qm_games=10)
    await upsert_account(session, data, discord_id=42)

    data.qm_mmr = 2100
    await upsert_account(session, data)

    rows = (await session.execute(select(hots_accounts))).mappings().all()
    assert len(rows) == 1
    assert rows[0]["HP_QM_MMR"] == 2100
    assert rows[0]["discord_id"] == 42
    assert rows[0]["is_primary"] is True


@pytest.mark.asyncio
async def test_lookup_command_replies_are_private(interaction):
    from bot.cogs.lookup import lookup

    interaction.response.defer = AsyncMock()
    interaction.client.hp_service.get_mmr = AsyncMock(side_effect=HeroesProfileError("down"))
    await lookup.callback(interaction, "Alice#1234")
    interaction.response.defer.assert_awaited_once_with(ephemeral=True)
    assert interaction.followup.send.await_args.kwargs["ephemeral"] is True

    interaction.followup.send.reset_mock()
    interaction.client.hp_service.get_mmr = AsyncMock(return_value=parse_mmr_payload("Alice#1234", 1, PAYLOAD))
    await lookup.callback(interaction, "Alice#1234")
    kwargs = interaction.followup.send.await_args.kwargs
    assert kwargs["ephemeral"] is True
    assert kwargs["embed"].title == "MMR — Alice#1234"


def test_updated_at_is_bumped_by_the_database():
    onupdate = hots_accounts.c.updated_at.onupdate
    assert onupdate.is_clause_element
