"""Lobby transitions - join/leave/rejoin/name/role/players/clear over the roster.

Every handler takes the store, the invoking user id and a parsed intent and
returns an Outcome describing the private reply and the optional public
announcement. Handlers never touch Discord; the lobby cog sends what they return.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from bot.services.roster_store import Player, Presence, Role, RosterStore

# Command names and button custom ids
JOIN = "join"
LEAVE = "leave"
REJOIN = "rejoin"
NAME = "name"
ROLE = "role"
PLAYERS = "players"
CLEAR = "clear"
PLAYERS_ALL = "players_all"

BUTTON_LABELS = {
    JOIN: "Join",
    LEAVE: "Leave",
    REJOIN: "Rejoin",
    NAME: "Change Name",
    ROLE: "Change Role",
    PLAYERS: "Show Players",
}
ACTION_BUTTONS = (LEAVE, NAME, ROLE, PLAYERS)
ROLE_BUTTONS = tuple(r.value for r in Role)
# Ids that only make sense as slash commands
COMMAND_ONLY = (CLEAR, PLAYERS_ALL)

NOT_IN_LOBBY = "You are not in the lobby. Use `/join` to join."
NO_PLAYERS = "No players in the lobby"
MESSAGE_LIMIT = 2000


# Intents - produced by bot.router from a slash command or button id


@dataclass(frozen=True)
class Join:
    username: str
    role: Role


@dataclass(frozen=True)
class Leave:
    pass


@dataclass(frozen=True)
class Rejoin:
    pass


@dataclass(frozen=True)
class ChangeName:
    username: Optional[str]  # None when pressed as a button


@dataclass(frozen=True)
class ChangeRole:
    role: Optional[Role]  # None when pressed as a button -> show the role selector


@dataclass(frozen=True)
class AssignRole:
    role: Role


@dataclass(frozen=True)
class ListPlayers:
    via_button: bool = False


@dataclass(frozen=True)
class ListAllPlayers:
    pass


@dataclass(frozen=True)
class Clear:
    pass


@dataclass(frozen=True)
class CommandOnly:
    """A slash-command-only id that arrived as a button press."""

    identifier: str


@dataclass(frozen=True)
class Unrecognized:
    identifier: str


@dataclass
class Outcome:
    """Result of a transition. `changed` means the roster must be saved."""

    reply: str
    announcement: Optional[str] = None
    buttons: Tuple[str, ...] = ()
    public_echo: Optional[str] = None
    changed: bool = False
    announcement_buttons: Tuple[str, ...] = ()


def mention(user_id: str) -> str:
    return f"<@{user_id}>"


def describe(player: Player) -> str:
    return f"`{player.username}`, `{player.role.label}`"


def handle_join(store: RosterStore, user_id: str, intent: Join) -> Outcome:
    player = Player(username=intent.username, role=intent.role, active=True)
    store.set(user_id, player)
    return Outcome(
        reply=f"You have joined the lobby as: {describe(player)}\n"
        "Use /leave to leave the lobby, or use the buttons below.",
        announcement=f"{mention(user_id)} ({player.username}) has joined as {player.role.label}",
        buttons=ACTION_BUTTONS,
        changed=True,
    )


def handle_leave(store: RosterStore, user_id: str, intent: Leave) -> Outcome:
    presence = store.presence(user_id)
    if presence is Presence.ABSENT:
        return Outcome(reply=NOT_IN_LOBBY)
    if presence is Presence.INACTIVE:
        return Outcome(reply="You are not in the lobby.", buttons=(REJOIN,))
    player = store.get(user_id)
    player.active = False
    return Outcome(
        reply="You left the lobby",
        announcement=f"{mention(user_id)} ({player.username}) has left the lobby",
        buttons=(REJOIN,),
        changed=True,
    )


def handle_rejoin(store: RosterStore, user_id: str, intent: Rejoin) -> Outcome:
    presence = store.presence(user_id)
    if presence is Presence.ABSENT:
        return Outcome(reply=NOT_IN_LOBBY)
    player = store.get(user_id)
    if presence is Presence.ACTIVE:
        return Outcome(
            reply=f"You are already in the lobby as: {describe(player)}",
            buttons=ACTION_BUTTONS,
        )
    player.active = True
    return Outcome(
        reply=f"You have rejoined the lobby as: {describe(player)}\n"
        "Use /leave to leave the lobby, or use the buttons below.",
        announcement=f"{mention(user_id)} ({player.username}) has rejoined as {player.role.label}",
        buttons=ACTION_BUTTONS,
        changed=True,
    )


def handle_name(store: RosterStore, user_id: str, intent: ChangeName) -> Outcome:
    if intent.username is None:
        return Outcome(reply="Buttons can't take text - use the `/name` command to change your name.")
    player = store.get(user_id)
    if player is None:
        # Non-members get an inactive record so /rejoin or the Join button works later
        store.set(user_id, Player(username=intent.username, role=Role.FLEX, active=False))
        return Outcome(
            reply=f"Your name has been set to `{intent.username}`. "
            "You are not in the lobby yet - use `/join` or the button below.",
            buttons=(JOIN,),
            changed=True,
        )
    player.username = intent.username
    return Outcome(reply=f"Your name has been changed to `{intent.username}`.", changed=True)


def handle_role(store: RosterStore, user_id: str, intent: ChangeRole) -> Outcome:
    if intent.role is None:
        return Outcome(reply="Choose your role:", buttons=ROLE_BUTTONS)
    return _set_role(store, user_id, intent.role)


def handle_assign_role(store: RosterStore, user_id: str, intent: AssignRole) -> Outcome:
    return _set_role(store, user_id, intent.role)


def _set_role(store: RosterStore, user_id: str, role: Role) -> Outcome:
    player = store.get(user_id)
    if player is None:
        return Outcome(reply=NOT_IN_LOBBY)
    player.role = role
    return Outcome(reply=f"Your role has been changed to {role.label}.", changed=True)


def handle_players(store: RosterStore, user_id: str, intent: ListPlayers) -> Outcome:
    active = store.active_players()
    lines = [f"{mention(uid)}: ({p.username}) {p.role.label}" for uid, p in active]
    reply = f"__**Players in the lobby**__: **{len(active)}**\n" + ("\n".join(lines) or NO_PLAYERS)
    echo = None
    if intent.via_button and active:
        echo = "`" + ",".join(f"{p.username} {p.role.value}" for _, p in active) + "`"
    return Outcome(reply=reply, public_echo=echo)


def handle_players_all(store: RosterStore, user_id: str, intent: ListAllPlayers) -> Outcome:
    """Every record ever created, active first, then by name."""
    players = sorted(store.snapshot(), key=lambda item: (not item[1].active, item[1].username.casefold()))
    active = sum(1 for _, p in players if p.active)
    header = f"__**All Players**__: **{len(players)}** ({active} active)\n"
    lines = []
    size = len(header)
    for index, (uid, p) in enumerate(players):
        line = f"{mention(uid)}: ({p.username}) {p.role.label}" + ("" if p.active else " *(inactive)*")
        if size + len(line) + 1 > MESSAGE_LIMIT - 40:
            lines.append(f"...and {len(players) - index} more")
            break
        lines.append(line)
        size += len(line) + 1
    return Outcome(reply=header + ("\n".join(lines) or NO_PLAYERS))


def handle_command_only(store: RosterStore, user_id: str, intent: CommandOnly) -> Outcome:
    return Outcome(reply=f"`/{intent.identifier}` can only be used as a slash command.")


def handle_clear(store: RosterStore, user_id: str, intent: Clear) -> Outcome:
    count = store.deactivate_all()
    return Outcome(
        reply=f"All players have been removed from the lobby ({count} were active).",
        announcement="The lobby has been cleared." if count else None,
        changed=count > 0,
    )


# Admin overrides act on another user's record.


def admin_set_role(store: RosterStore, target_id: str, role: Role) -> Outcome:
    player = store.get(target_id)
    if player is None:
        return Outcome(reply=f"{mention(target_id)} is not in the lobby.")
    player.role = role
    return Outcome(reply=f"{mention(target_id)}'s role has been changed to {role.label}.", changed=True)


def admin_set_name(store: RosterStore, target_id: str, username: str) -> Outcome:
    player = store.get(target_id)
    if player is None:
        store.set(target_id, Player(username=username, role=Role.FLEX, active=False))
    else:
        player.username = username
    return Outcome(reply=f"{mention(target_id)}'s name has been set to `{username}`.", changed=True)


def admin_set_active(store: RosterStore, target_id: str, active: bool) -> Outcome:
    player = store.get(target_id)
    if player is None:
        return Outcome(reply=f"{mention(target_id)} has never joined the lobby.")
    if player.active == active:
        state = "active" if active else "inactive"
        return Outcome(reply=f"{mention(target_id)} is already {state}.")
    player.active = active
    verb = "added to" if active else "removed from"
    return Outcome(
        reply=f"{mention(target_id)} ({player.username}) has been {verb} the lobby.",
        announcement=f"{mention(target_id)} ({player.username}) was {verb} the lobby by an admin",
        changed=True,
    )


def new_game(store: RosterStore) -> Outcome:
    """Deactivate everyone and announce who played last, so players re-confirm."""
    previous = [uid for uid, _ in store.active_players()]
    store.deactivate_all()
    previous_line = " ".join(mention(uid) for uid in previous) or "**No Previous Players**"
    return Outcome(
        reply="Game announced!",
        announcement="A new game has started! All players have been marked as inactive.\n\n"
        f"__**Previous Players**__:\n{previous_line}\n\n"
        "Please click below if you are going to play.",
        announcement_buttons=(REJOIN,),
        changed=bool(previous),
    )
