"""Team drafting - split the active lobby into two teams by MMR.

Players are numbered by MMR (1 = highest) when the sheet is ranked; admins
refer to those numbers in /set_teams and /swap. The sheet lives in memory
and is rebuilt by the next /draft or /set_teams.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bot.models import hots_accounts
from bot.services.roster_store import Player

TEAM_SIZE = 5


class TeamError(ValueError):
    """Bad team input. The message is shown to the admin as-is."""


@dataclass
class Drafted:
    number: int
    user_id: str
    player: Player
    mmr: int


def parse_teams_data(text: str) -> Tuple[List[int], Optional[List[int]]]:
    """`1 4 5, 2 3` -> ([1, 4, 5], [2, 3]). Team 2 is None when there's no comma."""
    first, sep, second = text.partition(",")
    team1 = [int(n) for n in re.findall(r"\d+", first)]
    if not team1:
        raise TeamError("Give the player numbers for team 1, e.g. `1 4 5 8 9, 2 3 6 7 10`.")
    team2 = [int(n) for n in re.findall(r"\d+", second)] if sep else None
    return team1, team2


async def player_mmrs(session: AsyncSession, user_ids: Iterable[str]) -> Dict[str, int]:
    """Best Heroes Profile MMR (QM, SL or ARAM) across each user's linked accounts."""
    ids = [int(uid) for uid in user_ids if uid.isdigit()]
    if not ids:
        return {}
    c = hots_accounts.c
    result = await session.execute(
        select(c.discord_id, c.HP_QM_MMR, c.HP_SL_MMR, c.HP_AR_MMR).where(c.discord_id.in_(ids))
    )
    best: Dict[str, int] = {}
    for discord_id, qm, sl, ar in result.all():
        mmr = max(qm or 0, sl or 0, ar or 0)
        key = str(discord_id)
        best[key] = max(best.get(key, 0), mmr)
    return best


class TeamSheet:
    """Ranked active players and the current team split."""

    def __init__(self) -> None:
        self.ranked: List[Drafted] = []
        self.team1: List[int] = []
        self.team2: List[int] = []

    @property
    def is_empty(self) -> bool:
        return not self.ranked

    def rank(self, players: Sequence[Tuple[str, Player]], mmrs: Dict[str, int]) -> None:
        """Number players by MMR, highest first, and forget the previous split. Ties keep roster order."""
        ordered = sorted(players, key=lambda item: mmrs.get(item[0], 0), reverse=True)
        self.ranked = [
            Drafted(number=i, user_id=uid, player=p, mmr=mmrs.get(uid, 0))
            for i, (uid, p) in enumerate(ordered, start=1)
        ]
        self.team1 = []
        self.team2 = []

    def draft(self) -> None:
        """Alternate down the ranking: 1 to team 1, 2 and 3 to team 2, then back and forth."""
        if not self.ranked:
            raise TeamError("Not enough players to draft teams.")
        team1: List[int] = []
        team2: List[int] = []
        for i, entry in enumerate(self.ranked):
            to_team2 = i == 1 or (i > 0 and i % 2 == 0)
            if to_team2 and len(team2) < TEAM_SIZE:
                team2.append(entry.number)
            elif len(team1) < TEAM_SIZE:
                team1.append(entry.number)
        self.team1 = team1
        self.team2 = team2

    def assign(self, team1: List[int], team2: Optional[List[int]] = None) -> None:
        """Set teams by player number. Without team 2, it's the first five players not on team 1."""
        total = len(self.ranked)
        if len(team1) > total:
            raise TeamError(f"Too many players provided. There are currently {total} players in total.")
        given = team1 + (team2 or [])
        duplicates = sorted({n for n in given if given.count(n) > 1})
        if duplicates:
            raise TeamError(
                f"Duplicate player numbers provided: `{', '.join(map(str, duplicates))}`. "
                "Please provide each player number only once."
            )
        unknown = sorted(n for n in given if n < 1 or n > total)
        if unknown:
            raise TeamError(
                f"Unknown player numbers: `{', '.join(map(str, unknown))}`. Players are numbered 1-{total}."
            )
        if team2 is None:
            team2 = [e.number for e in self.ranked if e.number not in team1][:TEAM_SIZE]
        self.team1 = sorted(team1)
        self.team2 = sorted(team2)

    def team_of(self, number: int) -> Optional[int]:
        if number in self.team1:
            return 1
        if number in self.team2:
            return 2
        return None

    def swap(self, a: int, b: int) -> None:
        """Swap two players between teams (or between a team and the spectators)."""
        total = len(self.ranked)
        if not (1 <= a <= total and 1 <= b <= total):
            raise TeamError(f"Invalid player numbers `{a}` and `{b}`. There are only {total} players.")
        team_a, team_b = self.team_of(a), self.team_of(b)
        if team_a == team_b:
            raise TeamError(f"Players {a} and {b} are on the same team. Cannot swap.")
        for number, old, new in ((a, team_a, team_b), (b, team_b, team_a)):
            if old is not None:
                self._team(old).remove(number)
            if new is not None:
                self._team(new).append(number)
        self.team1.sort()
        self.team2.sort()

    def _team(self, team: int) -> List[int]:
        return self.team1 if team == 1 else self.team2

    def _entries(self, numbers: Iterable[int]) -> List[Drafted]:
        wanted = set(numbers)
        return [e for e in self.ranked if e.number in wanted]

    def members(self, team: int) -> List[Drafted]:
        return self._entries(self._team(team))

    @property
    def spectators(self) -> List[Drafted]:
        placed = set(self.team1) | set(self.team2)
        return [e for e in self.ranked if e.number not in placed]
