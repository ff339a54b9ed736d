from __future__ import annotations

from aiogram.types import User as TelegramUser

from roomsync.db.models import Household, User
from roomsync.db.repo import RoomSyncRepository
from roomsync.services.authz import assert_household_member, require_household


async def current_user(repo: RoomSyncRepository, tg_user: TelegramUser) -> User:
    return await repo.ensure_user(tg_user.id, tg_user.username, tg_user.full_name)


async def current_household(repo: RoomSyncRepository, user: User) -> Household:
    household_id = require_household(user)
    household = await repo.get_household(household_id)
    return assert_household_member(household, user.member_id)


async def member_names(repo: RoomSyncRepository, household: Household) -> dict[str, str]:
    users = await repo.list_users(household.member_ids)
    return {user.member_id: user.display_name for user in users}


def command_args(text: str | None) -> str:
    if not text:
        return ""
    parts = text.split(maxsplit=1)
    return parts[1].strip() if len(parts) > 1 else ""
