from __future__ import annotations

from html import escape

from aiogram import Bot, F, Router
from aiogram.filters import Command
from aiogram.types import CallbackQuery, Message

from roomsync.config import Settings
from roomsync.db.models import Expense, SplitType, User
from roomsync.db.repo import RoomSyncRepository
from roomsync.handlers.common import command_args, current_household, current_user, member_names
from roomsync.keyboards import MENU_BALANCE, MENU_EXPENSES
from roomsync.logging import get_logger
from roomsync.services.authz import AuthorizationError
from roomsync.services.balances import BalanceError, expense_shares
from roomsync.services.formatting import format_balances, format_ledger, format_money
from roomsync.services.ledger import load_household_ledger
from roomsync.services.notify import notify_expense_added
from roomsync.utils.parse import parse_expense_command

expenses_router = Router()


async def render_expenses(repo: RoomSyncRepository, user: User, settings: Settings) -> str:
    household = await current_household(repo, user)
    ledger = await load_household_ledger(repo, household.id)
    if ledger is None:
        return "Household not found."
    names = await member_names(repo, household)
    return format_ledger(ledger, user.member_id, names, settings.zoneinfo, settings.currency_symbol)


async def render_balance(repo: RoomSyncRepository, user: User, settings: Settings) -> str:
    household = await current_household(repo, user)
    ledger = await load_household_ledger(repo, household.id)
    if ledger is None:
        return "Household not found."
    names = await member_names(repo, household)
    return format_balances(ledger, user.member_id, names, settings.currency_symbol)


@expenses_router.message(Command("addexpense"))
async def cmd_addexpense(message: Message, repo: RoomSyncRepository, settings: Settings, bot: Bot) -> None:
    if not message.from_user:
        return
    user = await current_user(repo, message.from_user)
    try:
        household = await current_household(repo, user)
        command = parse_expense_command(command_args(message.text))
    except (AuthorizationError, ValueError) as exc:
        await message.answer(f"❌ {escape(str(exc))}")
        return

    split_type = SplitType.EQUAL
    split_between = household.member_ids
    custom_splits = None
    if command.custom_splits:
        split_type = SplitType.CUSTOM
        custom_splits = {}
        for username, share in command.custom_splits.items():
            member = await repo.get_user_by_username(username)
            if member is None or member.member_id not in household.member_ids:
                await message.answer(f"❌ @{escape(username)} is not in this household.")
                return
            custom_splits[member.member_id] = share
        split_between = tuple(custom_splits)

    draft = Expense(
        id="draft",
        amount=command.amount,
        paid_by=user.member_id,
        split_between=split_between,
        split_type=split_type,
        custom_splits=custom_splits,
    )
    try:
        expense_shares(draft)
    except BalanceError as exc:
        await message.answer(f"❌ Invalid split: {escape(str(exc))}")
        return

    expense = await repo.create_expense(
        household_id=household.id,
        paid_by=user.id,
        title=command.title,
        amount=command.amount,
        split_between=split_between,
        split_type=split_type,
        custom_splits=custom_splits,
        category=command.category,
    )
    get_logger(__name__).info("expense.created", expense_id=expense.id, household_id=household.id)
    await message.answer(
        f"💸 Added <b>{escape(command.title)}</b> {format_money(expense.amount, settings.currency_symbol)}"
    )
    await notify_expense_added(bot, repo, household, expense, settings.currency_symbol)


@expenses_router.message(Command("expenses"))
async def cmd_expenses(message: Message, repo: RoomSyncRepository, settings: Settings) -> None:
    if not message.from_user:
        return
    user = await current_user(repo, message.from_user)
    try:
        text = await render_expenses(repo, user, settings)
    except AuthorizationError as exc:
        text = str(exc)
    await message.answer(text)


@expenses_router.message(Command("balance"))
async def cmd_balance(message: Message, repo: RoomSyncRepository, settings: Settings) -> None:
    if not message.from_user:
        return
    user = await current_user(repo, message.from_user)
    try:
        text = await render_balance(repo, user, settings)
    except AuthorizationError as exc:
        text = str(exc)
    await message.answer(text)


@expenses_router.callback_query(F.data.in_({MENU_EXPENSES, MENU_BALANCE}))
async def cb_expenses_menu(callback: CallbackQuery, repo: RoomSyncRepository, settings: Settings) -> None:
    user = await current_user(repo, callback.from_user)
    render = render_balance if callback.data == MENU_BALANCE else render_expenses
    try:
        text = await render(repo, user, settings)
    except AuthorizationError as exc:
        text = str(exc)
    if callback.message:
        await callback.message.answer(text)
    await callback.answer()
