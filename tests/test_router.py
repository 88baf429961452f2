"""Tests for interaction routing."""
import logging

import pytest

from bot import router
from bot.services.lobby import (
    AssignRole,
    ChangeName,
    ChangeRole,
    Clear,
    CommandOnly,
    Join,
    Leave,
    ListAllPlayers,
    ListPlayers,
    Rejoin,
    Unrecognized,
)
from bot.services.roster_store import Player, Role


@pytest.mark.parametrize("symbol", ["T", "A", "B", "H", "F"])
def test_role_symbol_buttons_assign_role(symbol):
    assert router.parse_button(symbol) == AssignRole(Role(symbol))


def test_fixed_buttons():
    assert router.parse_button("leave") == Leave()
    assert router.parse_button("rejoin") == Rejoin()
    assert router.parse_button("join") == Rejoin()
    assert router.parse_button("name") == ChangeName(None)
    assert router.parse_button("role") == ChangeRole(None)
    assert router.parse_button("players") == ListPlayers(via_button=True)


def test_unknown_button():
    assert router.parse_button("draft_pick_3") == Unrecognized("draft_pick_3")


def test_commands():
    assert router.parse_command("join", {"username": " Alice ", "role": "T"}) == Join("Alice", Role.TANK)
    assert router.parse_command("name", {"username": "Bob"}) == ChangeName("Bob")
    assert router.parse_command("role", {"role": "H"}) == ChangeRole(Role.HEALER)
    assert router.parse_command("players") == ListPlayers(via_button=False)
    assert router.parse_command("clear") == Clear()
    assert router.parse_command("players_all") == ListAllPlayers()
    assert router.parse_command("nope") == Unrecognized("nope")


def test_command_with_bad_role():
    with pytest.raises(ValueError):
        router.parse_command("join", {"username": "Alice", "role": "X"})


def test_parse_kind():
    assert router.parse(router.BUTTON, "T") == AssignRole(Role.TANK)
    assert router.parse(router.COMMAND, "leave") == Leave()
    with pytest.raises(ValueError):
        router.parse("modal", "leave")


def test_every_intent_has_a_handler():
    for intent_type in (
        Join, Leave, Rejoin, ChangeName, ChangeRole, AssignRole, ListPlayers, ListAllPlayers, Clear, CommandOnly
    ):
        assert intent_type in router.HANDLERS


def test_dispatch_runs_handler(store):
    outcome = router.dispatch(store, "U1", Join("Alice", Role.TANK))
    assert outcome.changed
    assert store.get("U1").username == "Alice"


def test_dispatch_ignores_unrecognized(store, caplog):
    with caplog.at_level(logging.DEBUG, logger="norcustoms.router"):
        assert router.dispatch(store, "U1", Unrecognized("stale")) is None
    assert "stale" in caplog.text
    assert len(store) == 0


@pytest.mark.parametrize("custom_id", ["clear", "players_all"])
def test_command_only_ids_from_a_button(custom_id):
    assert router.parse_button(custom_id) == CommandOnly(custom_id)


def test_dispatch_command_only_warns_and_replies(store, caplog):
    store.set("U1", Player("Alice", Role.TANK, active=True))
    with caplog.at_level(logging.WARNING, logger="norcustoms.router"):
        outcome = router.dispatch(store, "U1", CommandOnly("clear"))
    assert "only be used as a slash command" in outcome.reply
    assert not outcome.changed
    assert outcome.announcement is None
    assert "clear" in caplog.text
    # Nobody was removed from the lobby
    assert store.get("U1").active
