from __future__ import annotations

from datetime import datetime, timezone
from html import escape

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import CallbackQuery, InlineKeyboardMarkup, Message

from roomsync.config import Settings
from roomsync.db.models import User
from roomsync.db.repo import RoomSyncRepository
from roomsync.handlers.common import command_args, current_household, current_user, member_names
from roomsync.keyboards import CHORE_DONE_PREFIX, MENU_CHORES, chores_keyboard, parse_chore_callback
from roomsync.logging import get_logger
from roomsync.services.authz import AuthorizationError
from roomsync.services.chores import ChoreError, complete_chore
from roomsync.services.formatting import format_chores
from roomsync.utils.parse import parse_chore_command

chores_router = Router()


async def render_chores(
    repo: RoomSyncRepository, user: User, settings: Settings
) -> tuple[str, InlineKeyboardMarkup | None]:
    household = await current_household(repo, user)
    chores = await repo.list_household_chores(household.id)
    names = await member_names(repo, household)
    now = datetime.now(timezone.utc)
    return format_chores(chores, names, settings.zoneinfo, now), chores_keyboard(chores)


@chores_router.message(Command("addchore"))
async def cmd_addchore(message: Message, repo: RoomSyncRepository, settings: Settings) -> None:
    if not message.from_user:
        return
    user = await current_user(repo, message.from_user)
    try:
        household = await current_household(repo, user)
        command = parse_chore_command(command_args(message.text), settings.zoneinfo)
    except (AuthorizationError, ValueError) as exc:
        await message.answer(f"❌ {escape(str(exc))}")
        return

    assignee = user
    if command.assignee:
        found = await repo.get_user_by_username(command.assignee)
        if found is None or found.member_id not in household.member_ids:
            await message.answer(f"❌ @{escape(command.assignee)} is not in this household.")
            return
        assignee = found

    chore = await repo.create_chore(
        household_id=household.id,
        title=command.title,
        assigned_to=assignee.id,
        assigned_by=user.id,
        due_at=command.due_at,
        priority=command.priority,
        recurring_interval=command.interval,
    )
    get_logger(__name__).info("chore.created", chore_id=chore.id, household_id=household.id)
    due = chore.due_at.astimezone(settings.zoneinfo).strftime("%d.%m.%Y %H:%M")
    await message.answer(
        f"🧹 Chore #{chore.id} <b>{escape(chore.title)}</b> for {escape(assignee.display_name)}, due {due}"
    )


@chores_router.message(Command("chores"))
async def cmd_chores(message: Message, repo: RoomSyncRepository, settings: Settings) -> None:
    if not message.from_user:
        return
    user = await current_user(repo, message.from_user)
    try:
        text, keyboard = await render_chores(repo, user, settings)
    except AuthorizationError as exc:
        await message.answer(str(exc))
        return
    await message.answer(text, reply_markup=keyboard)


@chores_router.message(Command("done"))
async def cmd_done(message: Message, repo: RoomSyncRepository) -> None:
    if not message.from_user:
        return
    try:
        chore_id = int(command_args(message.text))
    except ValueError:
        await message.answer("Usage: /done &lt;chore_id&gt;")
        return

    user = await current_user(repo, message.from_user)
    try:
        household = await current_household(repo, user)
        chore = await complete_chore(repo, chore_id, user.id, household.id)
    except (AuthorizationError, ChoreError) as exc:
        await message.answer(f"❌ {escape(str(exc))}")
        return
    await message.answer(f"✅ Done: {escape(chore.title)}")


@chores_router.callback_query(F.data.startswith(CHORE_DONE_PREFIX))
async def cb_chore_done(callback: CallbackQuery, repo: RoomSyncRepository) -> None:
    chore_id = parse_chore_callback(callback.data)
    if chore_id is None:
        await callback.answer("Unknown chore")
        return

    user = await current_user(repo, callback.from_user)
    try:
        household = await current_household(repo, user)
        chore = await complete_chore(repo, chore_id, user.id, household.id)
    except (AuthorizationError, ChoreError) as exc:
        await callback.answer(str(exc), show_alert=True)
        return
    await callback.answer(f"Done: {chore.title}")


@chores_router.callback_query(F.data == MENU_CHORES)
async def cb_chores_menu(callback: CallbackQuery, repo: RoomSyncRepository, settings: Settings) -> None:
    user = await current_user(repo, callback.from_user)
    try:
        text, keyboard = await render_chores(repo, user, settings)
    except AuthorizationError as exc:
        text, keyboard = str(exc), None
    if callback.message:
        await callback.message.answer(text, reply_markup=keyboard)
    await callback.answer()
