from __future__ import annotations

from html import escape

from aiogram import Router
from aiogram.filters import Command, CommandStart
from aiogram.types import Message

from roomsync.db.repo import RoomSyncRepository
from roomsync.handlers.common import command_args, current_user
from roomsync.keyboards import main_menu_keyboard
from roomsync.logging import get_logger
from roomsync.services.households import HouseholdError, create_household, join_household

basic_router = Router()

HELP_TEXT = (
    "<b>RoomSync</b> keeps track of shared chores and expenses.\n\n"
    "/newhousehold &lt;name&gt; create a household\n"
    "/join &lt;code&gt; join with an invite code\n"
    "/dashboard household overview\n"
    "/addexpense &lt;amount&gt; | &lt;title&gt; | [category] | [@user=amount ...]\n"
    "/expenses recent expenses\n"
    "/balance who owes whom\n"
    "/addchore &lt;title&gt; | &lt;YYYY-MM-DD [HH:MM]&gt; | [@assignee] | [priority] | [repeat]\n"
    "/chores chore list\n"
    "/done &lt;chore_id&gt; mark a chore as done\n"
    "/calendar upcoming chores and recent expenses"
)


def _joined_text(name: str, invite_code: str) -> str:
    return (
        f"🏠 You are in <b>{escape(name)}</b>.\n"
        f"Invite code: <code>{invite_code}</code>\n\n"
        "Share the code so housemates can /join."
    )


@basic_router.message(CommandStart())
async def cmd_start(message: Message, repo: RoomSyncRepository) -> None:
    if not message.from_user:
        return
    user = await current_user(repo, message.from_user)

    # deep link: /start join_<CODE>
    param = command_args(message.text)
    if param.startswith("join_"):
        try:
            household = await join_household(repo, param[len("join_"):], user.id)
        except HouseholdError as exc:
            await message.answer(f"❌ {escape(str(exc))}", reply_markup=main_menu_keyboard())
            return
        await message.answer(_joined_text(household.name, household.invite_code), reply_markup=main_menu_keyboard())
        return

    if user.household_id is None:
        await message.answer(
            "👋 Welcome to RoomSync!\n\n"
            "You haven't joined a household yet. Create one with /newhousehold &lt;name&gt; "
            "or join an existing one with /join &lt;code&gt;."
        )
        return

    await message.answer("👋 Welcome back! What would you like to see?", reply_markup=main_menu_keyboard())


@basic_router.message(Command("help"))
async def cmd_help(message: Message) -> None:
    await message.answer(HELP_TEXT)


@basic_router.message(Command("newhousehold"))
async def cmd_newhousehold(message: Message, repo: RoomSyncRepository) -> None:
    if not message.from_user:
        return
    name = command_args(message.text)
    if not name:
        await message.answer("Usage: /newhousehold &lt;name&gt;")
        return

    user = await current_user(repo, message.from_user)
    if user.household_id is not None:
        await message.answer("You already belong to a household.")
        return

    try:
        household = await create_household(repo, name, user.id)
    except HouseholdError as exc:
        await message.answer(f"❌ {escape(str(exc))}")
        return
    await message.answer(_joined_text(household.name, household.invite_code), reply_markup=main_menu_keyboard())


@basic_router.message(Command("join"))
async def cmd_join(message: Message, repo: RoomSyncRepository) -> None:
    if not message.from_user:
        return
    code = command_args(message.text)
    if not code:
        await message.answer("Usage: /join &lt;code&gt;")
        return

    user = await current_user(repo, message.from_user)
    try:
        household = await join_household(repo, code, user.id)
    except HouseholdError as exc:
        get_logger(__name__).info("household.join.rejected", user_id=user.id, reason=str(exc))
        await message.answer(f"❌ {escape(str(exc))}")
        return
    await message.answer(_joined_text(household.name, household.invite_code), reply_markup=main_menu_keyboard())
