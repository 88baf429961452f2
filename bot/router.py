"""Interaction router - turns a slash command or button id into a lobby intent and runs its handler."""
from __future__ import annotations

import logging
from typing import Mapping, Optional

from bot.services import lobby
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
    Outcome,
    Rejoin,
    Unrecognized,
)
from bot.services.roster_store import Role, RosterStore

logger = logging.getLogger("norcustoms.router")

COMMAND = "command"
BUTTON = "button"

HANDLERS = {
    Join: lobby.handle_join,
    Leave: lobby.handle_leave,
    Rejoin: lobby.handle_rejoin,
    ChangeName: lobby.handle_name,
    ChangeRole: lobby.handle_role,
    AssignRole: lobby.handle_assign_role,
    ListPlayers: lobby.handle_players,
    ListAllPlayers: lobby.handle_players_all,
    Clear: lobby.handle_clear,
    CommandOnly: lobby.handle_command_only,
}


def parse_command(name: str, options: Optional[Mapping[str, str]] = None):
    """Intent for a slash command. Options are the command's string values keyed by option name.

    Raises KeyError when a required option is missing and ValueError for a role outside the five symbols.
    """
    options = options or {}
    if name == lobby.JOIN:
        return Join(username=options["username"].strip(), role=Role.parse(options["role"]))
    if name == lobby.LEAVE:
        return Leave()
    if name == lobby.REJOIN:
        return Rejoin()
    if name == lobby.NAME:
        return ChangeName(username=options["username"].strip())
    if name == lobby.ROLE:
        return ChangeRole(role=Role.parse(options["role"]))
    if name == lobby.PLAYERS:
        return ListPlayers(via_button=False)
    if name == lobby.PLAYERS_ALL:
        return ListAllPlayers()
    if name == lobby.CLEAR:
        return Clear()
    return Unrecognized(identifier=name)


def parse_button(custom_id: str):
    """Intent for a button press. Role symbols are a direct role assignment."""
    if Role.is_symbol(custom_id):
        return AssignRole(role=Role.parse(custom_id))
    if custom_id in (lobby.JOIN, lobby.REJOIN):
        # Buttons can't collect a name, so Join re-activates an existing record
        return Rejoin()
    if custom_id == lobby.LEAVE:
        return Leave()
    if custom_id == lobby.NAME:
        return ChangeName(username=None)
    if custom_id == lobby.ROLE:
        return ChangeRole(role=None)
    if custom_id == lobby.PLAYERS:
        return ListPlayers(via_button=True)
    if custom_id in lobby.COMMAND_ONLY:
        return CommandOnly(identifier=custom_id)
    return Unrecognized(identifier=custom_id)


def parse(kind: str, identifier: str, options: Optional[Mapping[str, str]] = None):
    if kind == COMMAND:
        return parse_command(identifier, options)
    if kind == BUTTON:
        return parse_button(identifier)
    raise ValueError(f"Unknown interaction kind: {kind}")


def dispatch(store: RosterStore, user_id: str, intent) -> Optional[Outcome]:
    """Run the handler for an intent. Unrecognized intents return None (stale or foreign buttons)."""
    if isinstance(intent, Unrecognized):
        logger.debug("Ignoring unrecognized interaction id: %s", intent.identifier)
        return None
    if isinstance(intent, CommandOnly):
        logger.warning("Command-only id %s pressed as a button by %s", intent.identifier, user_id)
    handler = HANDLERS[type(intent)]
    return handler(store, user_id, intent)
