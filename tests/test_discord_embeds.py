"""Tests for lobby button rows."""
import pytest

from bot.services.discord_embeds import BUTTON_VIEW_TIMEOUT, build_button_view, button_label


def test_no_buttons_no_view():
    assert build_button_view(()) is None


def test_button_labels():
    assert button_label("T") == "🛡️ Tank"
    assert button_label("rejoin") == "Rejoin"


@pytest.mark.asyncio
async def test_button_views_expire():
    view = build_button_view(("rejoin", "players"))
    assert view.timeout == BUTTON_VIEW_TIMEOUT
    assert not view.is_persistent()
    assert [item.custom_id for item in view.children] == ["rejoin", "players"]
