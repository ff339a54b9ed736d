from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from itertools import groupby
from typing import Iterable, Optional
from zoneinfo import ZoneInfo

from roomsync.db.models import Chore, ChorePriority, Expense


class EntryType(str, Enum):
    CHORE = "chore"
    EXPENSE = "expense"


@dataclass(slots=True)
class CalendarEntry:
    entry_id: str
    title: str
    entry_type: EntryType
    when: datetime
    priority: Optional[ChorePriority] = None
    amount: Optional[Decimal] = None


def build_calendar(
    chores: Iterable[Chore],
    expenses: Iterable[Expense],
    recent_expenses: int = 10,
) -> list[CalendarEntry]:
    """Open chores plus the most recent expenses, oldest first.

    ``expenses`` is expected newest first, the way the store returns them.
    """
    entries = [
        CalendarEntry(
            entry_id=str(chore.id),
            title=chore.title,
            entry_type=EntryType.CHORE,
            when=chore.due_at,
            priority=chore.priority,
        )
        for chore in chores
        if not chore.completed
    ]
    for expense in list(expenses)[:recent_expenses]:
        when = expense.date or expense.created_at
        if when is None:
            continue
        entries.append(
            CalendarEntry(
                entry_id=expense.id,
                title=expense.title,
                entry_type=EntryType.EXPENSE,
                when=when,
                amount=expense.amount,
            )
        )
    entries.sort(key=lambda entry: entry.when)
    return entries


def group_by_date(entries: Iterable[CalendarEntry], tz: ZoneInfo) -> list[tuple[date, list[CalendarEntry]]]:
    ordered = sorted(entries, key=lambda entry: entry.when)
    return [
        (day, list(items))
        for day, items in groupby(ordered, key=lambda entry: entry.when.astimezone(tz).date())
    ]


def date_label(day: date, today: date) -> str:
    if day == today:
        return "Today"
    if day == today + timedelta(days=1):
        return "Tomorrow"
    if day < today:
        return f"Overdue · {day.strftime('%a, %b %d')}"
    return day.strftime("%A, %B %d")
