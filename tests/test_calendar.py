from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

from roomsync.db.models import Chore, ChorePriority, Expense
from roomsync.services.calendar import EntryType, build_calendar, date_label, group_by_date

BASE = datetime(2026, 5, 10, 8, 0, tzinfo=timezone.utc)


def make_chore(chore_id: int, hours: int, completed: bool = False) -> Chore:
    return Chore(
        id=chore_id,
        household_id=1,
        title=f"chore {chore_id}",
        assigned_to="1",
        assigned_by="1",
        due_at=BASE + timedelta(hours=hours),
        priority=ChorePriority.HIGH,
        completed=completed,
    )


def make_expense(expense_id: int, hours: int) -> Expense:
    return Expense(
        id=str(expense_id),
        amount=Decimal("5.00"),
        paid_by="1",
        split_between=("1",),
        title=f"expense {expense_id}",
        date=BASE + timedelta(hours=hours),
    )


def test_build_calendar_merges_and_sorts():
    chores = [make_chore(1, 30), make_chore(2, 2, completed=True), make_chore(3, -5)]
    expenses = [make_expense(10, 1), make_expense(11, -2)]

    entries = build_calendar(chores, expenses)

    assert [(e.entry_type, e.entry_id) for e in entries] == [
        (EntryType.CHORE, "3"),
        (EntryType.EXPENSE, "11"),
        (EntryType.EXPENSE, "10"),
        (EntryType.CHORE, "1"),
    ]
    assert entries[0].priority == ChorePriority.HIGH
    assert entries[1].amount == Decimal("5.00")


def test_build_calendar_limits_recent_expenses():
    # newest first, as the store returns them
    expenses = [make_expense(i, -i) for i in range(15)]

    entries = build_calendar([], expenses, recent_expenses=10)

    assert len(entries) == 10
    assert {e.entry_id for e in entries} == {str(i) for i in range(10)}


def test_group_by_date_uses_local_timezone():
    tz = ZoneInfo("America/New_York")
    entries = build_calendar([make_chore(1, -6), make_chore(2, 2)], [])

    groups = group_by_date(entries, tz)

    # 02:00 UTC is still the previous evening in New York
    assert [day for day, _ in groups] == [date(2026, 5, 9), date(2026, 5, 10)]


def test_date_label():
    today = date(2026, 5, 10)
    assert date_label(today, today) == "Today"
    assert date_label(date(2026, 5, 11), today) == "Tomorrow"
    assert date_label(date(2026, 5, 8), today).startswith("Overdue")
    assert date_label(date(2026, 5, 20), today) == "Wednesday, May 20"
