"""Key/value settings stored in the database."""
from __future__ import annotations

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from bot.models import Setting

REPLAY_FOLDER = "replay_folder"


async def get_setting(session: AsyncSession, key: str) -> Optional[str]:
    setting = await session.get(Setting, key)
    return setting.value if setting else None


async def set_setting(session: AsyncSession, key: str, value: str) -> None:
    """Insert or overwrite a setting and commit."""
    setting = await session.get(Setting, key)
    if setting:
        setting.value = value
    else:
        session.add(Setting(key=key, value=value))
    await session.commit()


async def get_replay_folder(session: AsyncSession) -> Optional[str]:
    return await get_setting(session, REPLAY_FOLDER)


async def set_replay_folder(session: AsyncSession, path: str) -> None:
    await set_setting(session, REPLAY_FOLDER, path)
