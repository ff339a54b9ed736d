from __future__ import annotations

from typing import Iterable

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from roomsync.db.models import Chore

MENU_DASHBOARD = "menu:dashboard"
MENU_BALANCE = "menu:balance"
MENU_EXPENSES = "menu:expenses"
MENU_CHORES = "menu:chores"
MENU_CALENDAR = "menu:calendar"
CHORE_DONE_PREFIX = "chore:done:"


def main_menu_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[
        [
            InlineKeyboardButton(text="🏠 Dashboard", callback_data=MENU_DASHBOARD),
            InlineKeyboardButton(text="📅 Calendar", callback_data=MENU_CALENDAR),
        ],
        [
            InlineKeyboardButton(text="🧹 Chores", callback_data=MENU_CHORES),
            InlineKeyboardButton(text="💸 Expenses", callback_data=MENU_EXPENSES),
        ],
        [InlineKeyboardButton(text="⚖️ Balance", callback_data=MENU_BALANCE)],
    ])


def chores_keyboard(chores: Iterable[Chore], limit: int = 8) -> InlineKeyboardMarkup | None:
    rows = [
        [InlineKeyboardButton(text=f"✅ #{chore.id} {chore.title}"[:60], callback_data=f"{CHORE_DONE_PREFIX}{chore.id}")]
        for chore in chores
        if not chore.completed
    ][:limit]
    if not rows:
        return None
    return InlineKeyboardMarkup(inline_keyboard=rows)


def parse_chore_callback(data: str | None) -> int | None:
    if not data or not data.startswith(CHORE_DONE_PREFIX):
        return None
    try:
        return int(data[len(CHORE_DONE_PREFIX):])
    except ValueError:
        return None
