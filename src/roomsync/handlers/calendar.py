from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import CallbackQuery, Message

from roomsync.config import Settings
from roomsync.db.models import User
from roomsync.db.repo import RoomSyncRepository
from roomsync.handlers.common import current_household, current_user
from roomsync.keyboards import MENU_CALENDAR, MENU_DASHBOARD
from roomsync.services.authz import AuthorizationError
from roomsync.services.calendar import build_calendar, group_by_date
from roomsync.services.dashboard import build_dashboard
from roomsync.services.formatting import format_calendar, format_dashboard
from roomsync.services.ledger import load_household_ledger

calendar_router = Router()


async def render_calendar(repo: RoomSyncRepository, user: User, settings: Settings) -> str:
    household = await current_household(repo, user)
    chores, expenses = await asyncio.gather(
        repo.list_household_chores(household.id),
        repo.list_household_expenses(household.id),
    )
    tz = settings.zoneinfo
    entries = build_calendar(chores, expenses, settings.calendar_recent_expenses)
    today = datetime.now(timezone.utc).astimezone(tz).date()
    return format_calendar(group_by_date(entries, tz), today, tz, settings.currency_symbol)


async def render_dashboard(repo: RoomSyncRepository, user: User, settings: Settings) -> str:
    household = await current_household(repo, user)
    chores, ledger = await asyncio.gather(
        repo.list_household_chores(household.id),
        load_household_ledger(repo, household.id),
    )
    stats = build_dashboard(chores, ledger, user.member_id, datetime.now(timezone.utc))
    return format_dashboard(stats, household, settings.currency_symbol)


@calendar_router.message(Command("calendar"))
async def cmd_calendar(message: Message, repo: RoomSyncRepository, settings: Settings) -> None:
    if not message.from_user:
        return
    user = await current_user(repo, message.from_user)
    try:
        text = await render_calendar(repo, user, settings)
    except AuthorizationError as exc:
        text = str(exc)
    await message.answer(text)


@calendar_router.message(Command("dashboard", "household"))
async def cmd_dashboard(message: Message, repo: RoomSyncRepository, settings: Settings) -> None:
    if not message.from_user:
        return
    user = await current_user(repo, message.from_user)
    try:
        text = await render_dashboard(repo, user, settings)
    except AuthorizationError as exc:
        text = str(exc)
    await message.answer(text)


@calendar_router.callback_query(F.data.in_({MENU_CALENDAR, MENU_DASHBOARD}))
async def cb_calendar_menu(callback: CallbackQuery, repo: RoomSyncRepository, settings: Settings) -> None:
    user = await current_user(repo, callback.from_user)
    render = render_calendar if callback.data == MENU_CALENDAR else render_dashboard
    try:
        text = await render(repo, user, settings)
    except AuthorizationError as exc:
        text = str(exc)
    if callback.message:
        await callback.message.answer(text)
    await callback.answer()
