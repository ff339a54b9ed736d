from __future__ import annotations

from html import escape
from typing import Protocol

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError

from roomsync.db.models import Expense, Household, User
from roomsync.logging import get_logger
from roomsync.services.formatting import format_money


class MemberRepository(Protocol):
    async def list_users(self, user_ids: list[str]) -> list[User]: ...


def chore_reminder_text(title: str) -> str:
    return f"🧹 <b>Chore reminder</b>\nDon't forget: {escape(title)} is due today!"


def expense_added_text(expense: Expense, symbol: str = "$") -> str:
    return f"💸 <b>Expense added</b>\nNew expense: {escape(expense.title)} - {format_money(expense.amount, symbol)}"


async def send_safely(bot: Bot, tg_id: int, text: str) -> bool:
    try:
        await bot.send_message(tg_id, text)
    except TelegramAPIError as exc:
        get_logger(__name__).warning("notify.send.failed", tg_id=tg_id, error=str(exc))
        return False
    return True


async def notify_expense_added(
    bot: Bot,
    repo: MemberRepository,
    household: Household,
    expense: Expense,
    symbol: str = "$",
) -> int:
    recipients = [member for member in household.member_ids if member != expense.paid_by]
    if not recipients:
        return 0

    text = expense_added_text(expense, symbol)
    sent = 0
    for user in await repo.list_users(recipients):
        if await send_safely(bot, user.tg_id, text):
            sent += 1
    get_logger(__name__).info("notify.expense_added", expense_id=expense.id, sent=sent)
    return sent
