from datetime import datetime, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from roomsync.db.models import ChorePriority, ExpenseCategory, RecurringInterval
from roomsync.utils.parse import (
    parse_amount,
    parse_chore_command,
    parse_custom_splits,
    parse_due_datetime,
    parse_expense_command,
)

BERLIN = ZoneInfo("Europe/Berlin")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("12", "12.00"), ("12.5", "12.50"), ("$7,25", "7.25"), (" 0.01 ", "0.01")],
)
def test_parse_amount(raw, expected):
    assert parse_amount(raw) == Decimal(expected)


@pytest.mark.parametrize("raw", ["0", "-3", "abc", "1.234", "NaN"])
def test_parse_amount_rejects(raw):
    with pytest.raises(ValueError):
        parse_amount(raw)


def test_parse_due_datetime_with_time():
    due = parse_due_datetime("2026-07-01 18:30", BERLIN)
    assert due == datetime(2026, 7, 1, 16, 30, tzinfo=timezone.utc)


def test_parse_due_datetime_defaults_to_morning():
    due = parse_due_datetime("2026-01-15", BERLIN)
    assert due == datetime(2026, 1, 15, 8, 0, tzinfo=timezone.utc)


def test_parse_due_datetime_explicit_zone():
    due = parse_due_datetime("2026-01-15 10:00 UTC", BERLIN)
    assert due == datetime(2026, 1, 15, 10, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("raw", ["", "tomorrow", "2026-01-15 10:00 Mars/Base"])
def test_parse_due_datetime_rejects(raw):
    with pytest.raises(ValueError):
        parse_due_datetime(raw, BERLIN)


def test_parse_custom_splits():
    assert parse_custom_splits("@alice=20 bob=12,50") == {"alice": Decimal("20.00"), "bob": Decimal("12.50")}


@pytest.mark.parametrize("raw", ["alice", "@alice=-1", "@alice=1 @alice=2", "@alice=x"])
def test_parse_custom_splits_rejects(raw):
    with pytest.raises(ValueError):
        parse_custom_splits(raw)


def test_parse_expense_command_minimal():
    command = parse_expense_command("42 | Pizza night")
    assert command.amount == Decimal("42.00")
    assert command.title == "Pizza night"
    assert command.category == ExpenseCategory.OTHER
    assert command.custom_splits == {}


def test_parse_expense_command_full():
    command = parse_expense_command("30 | Groceries | groceries | @alice=10 @bob=20")
    assert command.category == ExpenseCategory.GROCERIES
    assert command.custom_splits == {"alice": Decimal("10.00"), "bob": Decimal("20.00")}


def test_parse_expense_command_unknown_category():
    with pytest.raises(ValueError, match="category"):
        parse_expense_command("30 | Groceries | shoes")


def test_parse_chore_command():
    command = parse_chore_command("Take out trash | 2026-02-03 20:00 | @bob | high | weekly", BERLIN)
    assert command.title == "Take out trash"
    assert command.due_at == datetime(2026, 2, 3, 19, 0, tzinfo=timezone.utc)
    assert command.assignee == "bob"
    assert command.priority == ChorePriority.HIGH
    assert command.interval == RecurringInterval.WEEKLY


def test_parse_chore_command_requires_due_date():
    with pytest.raises(ValueError, match="Usage"):
        parse_chore_command("Vacuum", BERLIN)
