"""Heroes of the Storm account model - battle tag linked to a Discord user, plus imported stats."""
from __future__ import annotations

from sqlalchemy import BigInteger, Boolean, Column, DateTime, Float, Integer, String, Table, Text, func

from bot.models.base import Base

# (column, spreadsheet header, kind). kind is one of: int, real, pct, text.
# pct values are stored as plain numbers without the "%"; text holds mm:ss durations verbatim.
HP_COLUMNS = [
    ("HP_QM_MMR", "QM MMR", "int"),
    ("HP_SL_MMR", "SL MMR", "int"),
    ("HP_QM_Games", "QM Games", "int"),
    ("HP_SL_Games", "SL Games", "int"),
]

SOTS_COLUMNS = [
    ("SotS_Win_Pct", "Win %", "pct"),
    ("SotS_Games", "Games", "int"),
    ("SotS_Takedowns", "Takedowns", "real"),
    ("SotS_Kills", "Kills", "real"),
    ("SotS_Assists", "Assists", "real"),
    ("SotS_Deaths", "Deaths", "real"),
    ("SotS_Kill_Participation", "Kill Participation", "pct"),
    ("SotS_KDA", "KDA", "real"),
    ("SotS_Highest_Kill_Streak", "Highest Kill Streak", "real"),
    ("SotS_Vengeances", "Vengeances", "real"),
    ("SotS_Time_Dead", "Time Dead", "text"),
    ("SotS_Time_Dead_Pct", "Time Dead %", "pct"),
    ("SotS_Deaths_While_Outnumbered", "Deaths While Outnumbered", "real"),
    ("SotS_Escapes", "Escapes", "real"),
    ("SotS_Team_Fight_Escapes", "Team Fight Escapes", "real"),
    ("SotS_Hero_Damage", "Hero Damage", "real"),
    ("SotS_DPM", "DPM", "real"),
    ("SotS_Physical_Damage", "Physical Damage", "real"),
    ("SotS_Ability_Damage", "Ability Damage", "real"),
    ("SotS_Damage_per_Death", "Damage per Death", "real"),
    ("SotS_Team_Fight_Hero_Damage", "Team Fight Hero Damage", "real"),
    ("SotS_Siege_Damage", "Siege Damage", "real"),
    ("SotS_Structure_Damage", "Structure Damage", "real"),
    ("SotS_Minion_Damage", "Minion Damage", "real"),
    ("SotS_Summon_Damage", "Summon Damage", "real"),
    ("SotS_Creep_Damage", "Creep Damage", "real"),
    ("SotS_Healing", "Healing", "real"),
    ("SotS_HPM", "HPM", "real"),
    ("SotS_Healing_per_Death", "Healing per Death", "real"),
    ("SotS_Team_Fight_Healing", "Team Fight Healing", "real"),
    ("SotS_Self_Healing", "Self Healing", "real"),
    ("SotS_Allied_Shields", "Allied Shields", "real"),
    ("SotS_Clutch_Heals", "Clutch Heals", "real"),
    ("SotS_Damage_Taken", "Damage Taken", "real"),
    ("SotS_Damage_Soaked", "Damage Soaked", "real"),
    ("SotS_Damage_Taken_per_Death", "Damage Taken per Death", "real"),
    ("SotS_Team_Fight_Damage_Taken", "Team Fight Damage Taken", "real"),
    ("SotS_CC_Time", "CC Time", "text"),
    ("SotS_Root_Time", "Root Time", "text"),
    ("SotS_Silence_Time", "Silence Time", "text"),
    ("SotS_Stun_Time", "Stun Time", "text"),
    ("SotS_Time_on_Fire", "Time on Fire", "text"),
    ("SotS_XP_Contribution", "XP Contribution", "real"),
    ("SotS_XPM", "XPM", "real"),
    ("SotS_Merc_Camp_Captures", "Merc Camp Captures", "real"),
    ("SotS_Watch_Tower_Captures", "Watch Tower Captures", "real"),
    ("SotS_Aces", "Aces", "real"),
    ("SotS_Wipes", "Wipes", "real"),
    ("SotS_Pct_of_Game_with_Level_Adv", "% of Game with Level Adv.", "pct"),
    ("SotS_Pct_of_Game_with_Hero_Adv", "% of Game with Hero Adv.", "pct"),
    ("SotS_Passive_XP_Second", "Passive XP/Second", "real"),
    ("SotS_Passive_XP_Gained", "Passive XP Gained", "real"),
    ("SotS_Altar_Damage_Done", "Altar Damage Done", "real"),
    ("SotS_Damage_to_Immortal", "Damage to Immortal", "real"),
    ("SotS_Dragon_Knights_Captured", "Dragon Knights Captured", "real"),
    ("SotS_Shrines_Captured", "Shrines Captured", "real"),
    ("SotS_Dubloons_Held_At_End", "Dubloons Held At End", "real"),
    ("SotS_Dubloons_Turned_In", "Dubloons Turned In", "real"),
    ("SotS_Skulls_Collected", "Skulls Collected", "real"),
    ("SotS_Shrine_Minion_Damage", "Shrine Minion Damage", "real"),
    ("SotS_Plant_Damage", "Plant Damage", "real"),
    ("SotS_Seeds_Collected", "Seeds Collected", "real"),
    ("SotS_Garden_Seeds_Collected", "Garden Seeds Collected", "real"),
    ("SotS_Gems_Turned_In", "Gems Turned In", "real"),
    ("SotS_Nuke_Damage", "Nuke Damage", "real"),
    ("SotS_Curse_Damage", "Curse Damage", "real"),
    ("SotS_Time_On_Temple", "Time On Temple", "text"),
    ("SotS_Damage_Done_to_Zerg", "Damage Done to Zerg", "real"),
    ("SotS_Cage_Unlocks_Interrupted", "Cage Unlocks Interrupted", "real"),
    ("SotS_Hero_Pool", "Hero Pool", "int"),
    ("SotS_Damage_Ratio", "Damage Ratio", "real"),
    ("SotS_Pct_of_Team_Damage", "% of Team Damage", "pct"),
    ("SotS_Pct_of_Team_Damage_Taken", "% of Team Damage Taken", "pct"),
    ("SotS_Pct_of_Team_Damage_Healed", "% of Team Damage Healed", "pct"),
    ("SotS_Pct_of_Time_Slow_CC", "% of Time Slow CC", "pct"),
    ("SotS_Pct_of_Time_Non_Slow_CC", "% of Time Non-Slow CC", "pct"),
    ("SotS_Votes", "Votes", "int"),
    ("SotS_Awards", "Awards", "int"),
    ("SotS_Award_Pct", "Award %", "pct"),
    ("SotS_MVP", "MVP", "int"),
    ("SotS_MVP_Pct", "MVP %", "pct"),
    ("SotS_Bsteps", "Bsteps", "int"),
    ("SotS_Bstep_TD", "Bstep TD", "int"),
    ("SotS_Bstep_Deaths", "Bstep Deaths", "int"),
    ("SotS_Taunts", "Taunts", "int"),
    ("SotS_Taunt_TD", "Taunt TD", "int"),
    ("SotS_Taunt_Deaths", "Taunt Deaths", "int"),
    ("SotS_Sprays", "Sprays", "int"),
    ("SotS_Spray_TD", "Spray TD", "int"),
    ("SotS_Spray_Deaths", "Spray Deaths", "int"),
    ("SotS_Dances", "Dances", "int"),
    ("SotS_Dance_TD", "Dance TD", "int"),
    ("SotS_Dance_Deaths", "Dance Deaths", "int"),
]

# Columns filled from the stats spreadsheet
IMPORT_COLUMNS = HP_COLUMNS + SOTS_COLUMNS

_SQL_TYPES = {"int": Integer, "real": Float, "pct": Float, "text": Text}

hots_accounts = Table(
    "hots_accounts",
    Base.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("discord_id", BigInteger, nullable=True, index=True),
    Column("hots_battle_tag", String(64), nullable=False, unique=True),
    Column("is_primary", Boolean, nullable=False, default=False),
    Column("updated_at", DateTime, server_default=func.current_timestamp(), onupdate=func.current_timestamp()),
    Column("HP_URL", Text, nullable=True),
    Column("HP_AR_MMR", Integer, nullable=True),
    Column("HP_AR_Games", Integer, nullable=True),
    *[Column(name, _SQL_TYPES[kind], nullable=True) for name, _, kind in IMPORT_COLUMNS],
)

