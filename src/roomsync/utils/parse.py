from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional
from zoneinfo import ZoneInfo

from roomsync.db.models import ChorePriority, ExpenseCategory, RecurringInterval

_SPLIT_RE = re.compile(r"^@?(?P<username>[A-Za-z0-9_]+)=(?P<amount>\S+)$")


def _money(text: str, label: str) -> Decimal:
    try:
        amount = Decimal(text.strip().lstrip("$").replace(",", "."))
    except InvalidOperation as exc:
        raise ValueError(f"Not a valid amount for {label}: {text}") from exc
    if not amount.is_finite():
        raise ValueError(f"Not a valid amount for {label}: {text}")
    if amount.as_tuple().exponent < -2:  # type: ignore[operator]
        raise ValueError(f"Amount for {label} can have at most two decimal places")
    return amount.quantize(Decimal("0.01"))


def parse_amount(value: str) -> Decimal:
    """Parse a positive money amount with at most two decimal places.

    Accepts ``12``, ``12.5``, ``12,50`` and a leading ``$``.
    """
    amount = _money(value, "the expense")
    if amount <= 0:
        raise ValueError("Amount must be greater than zero")
    return amount


def parse_due_datetime(value: str, default_tz: ZoneInfo) -> datetime:
    """Parse ``YYYY-MM-DD [HH:MM] [TZ]`` into an aware UTC datetime.

    A missing time means 09:00 local time.
    """
    parts = value.strip().split()
    if not parts:
        raise ValueError("Expected 'YYYY-MM-DD [HH:MM] [TZ]'")

    date_part = parts[0]
    time_part = "09:00"
    tz_name = default_tz.key
    if len(parts) > 1:
        if ":" in parts[1]:
            time_part = parts[1]
            if len(parts) > 2:
                tz_name = parts[2]
        else:
            tz_name = parts[1]

    try:
        tz = ZoneInfo(tz_name)
    except Exception as exc:
        raise ValueError("Unknown time zone") from exc

    try:
        naive = datetime.strptime(f"{date_part} {time_part}", "%Y-%m-%d %H:%M")
    except ValueError as exc:
        raise ValueError("Expected 'YYYY-MM-DD [HH:MM] [TZ]'") from exc
    aware = naive.replace(tzinfo=tz)
    return aware.astimezone(ZoneInfo("UTC"))


def parse_custom_splits(value: str) -> dict[str, Decimal]:
    """Parse ``@alice=20 @bob=12.50`` into a username to amount mapping."""
    splits: dict[str, Decimal] = {}
    for token in value.split():
        match = _SPLIT_RE.match(token)
        if not match:
            raise ValueError(f"Expected @user=amount, got: {token}")
        username = match.group("username")
        if username in splits:
            raise ValueError(f"@{username} listed twice")
        share = _money(match.group("amount"), f"@{username}")
        if share < 0:
            raise ValueError(f"Share of @{username} must not be negative")
        splits[username] = share
    return splits


def parse_category(value: str) -> ExpenseCategory:
    try:
        return ExpenseCategory(value.strip().lower())
    except ValueError as exc:
        options = ", ".join(category.value for category in ExpenseCategory)
        raise ValueError(f"Unknown category. Choose one of: {options}") from exc


def parse_priority(value: str) -> ChorePriority:
    try:
        return ChorePriority(value.strip().lower())
    except ValueError as exc:
        raise ValueError("Priority must be low, medium or high") from exc


def parse_interval(value: str) -> RecurringInterval:
    try:
        return RecurringInterval(value.strip().lower())
    except ValueError as exc:
        raise ValueError("Repeat must be daily, weekly or monthly") from exc


@dataclass(slots=True)
class ExpenseCommand:
    amount: Decimal
    title: str
    category: ExpenseCategory = ExpenseCategory.OTHER
    custom_splits: dict[str, Decimal] = field(default_factory=dict)


def parse_expense_command(text: str) -> ExpenseCommand:
    """``<amount> | <title> | [category] | [@user=amount ...]``"""
    parts = [part.strip() for part in text.split("|")]
    if len(parts) < 2 or not parts[1]:
        raise ValueError("Usage: /addexpense <amount> | <title> | [category] | [@user=amount ...]")

    command = ExpenseCommand(amount=parse_amount(parts[0]), title=parts[1])
    if len(parts) > 2 and parts[2]:
        command.category = parse_category(parts[2])
    if len(parts) > 3 and parts[3]:
        command.custom_splits = parse_custom_splits(parts[3])
    return command


@dataclass(slots=True)
class ChoreCommand:
    title: str
    due_at: datetime
    assignee: Optional[str] = None
    priority: ChorePriority = ChorePriority.MEDIUM
    interval: Optional[RecurringInterval] = None


def parse_chore_command(text: str, default_tz: ZoneInfo) -> ChoreCommand:
    """``<title> | <YYYY-MM-DD [HH:MM]> | [@assignee] | [priority] | [repeat]``"""
    parts = [part.strip() for part in text.split("|")]
    if len(parts) < 2 or not parts[0]:
        raise ValueError("Usage: /addchore <title> | <YYYY-MM-DD [HH:MM]> | [@assignee] | [priority] | [repeat]")

    command = ChoreCommand(title=parts[0], due_at=parse_due_datetime(parts[1], default_tz))
    if len(parts) > 2 and parts[2]:
        command.assignee = parts[2].lstrip("@")
    if len(parts) > 3 and parts[3]:
        command.priority = parse_priority(parts[3])
    if len(parts) > 4 and parts[4]:
        command.interval = parse_interval(parts[4])
    return command
