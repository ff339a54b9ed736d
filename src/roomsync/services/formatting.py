from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from html import escape
from typing import Iterable, Mapping, Optional
from zoneinfo import ZoneInfo

from roomsync.db.models import Chore, ChorePriority, Expense, ExpenseCategory, Household
from roomsync.services.balances import Balance
from roomsync.services.calendar import CalendarEntry, EntryType, date_label
from roomsync.services.dashboard import DashboardStats
from roomsync.services.ledger import HouseholdLedger

CATEGORY_ICONS = {
    ExpenseCategory.FOOD: "🍽️",
    ExpenseCategory.UTILITIES: "⚡",
    ExpenseCategory.RENT: "🏠",
    ExpenseCategory.GROCERIES: "🛒",
    ExpenseCategory.ENTERTAINMENT: "🎬",
    ExpenseCategory.OTHER: "💰",
}

PRIORITY_ICONS = {
    ChorePriority.LOW: "🟢",
    ChorePriority.MEDIUM: "🟡",
    ChorePriority.HIGH: "🔴",
}


def format_money(amount: Decimal, symbol: str = "$") -> str:
    return f"{symbol}{abs(amount):.2f}"


def format_signed(amount: Decimal, symbol: str = "$") -> str:
    sign = "+" if amount >= 0 else "-"
    return f"{sign}{format_money(amount, symbol)}"


def format_net_balance(net: Decimal, symbol: str = "$") -> str:
    if net > 0:
        return f"{format_signed(net, symbol)} owed to you"
    if net < 0:
        return f"{format_signed(net, symbol)} you owe"
    return "All settled up"


def name_of(names: Mapping[str, str], member_id: str) -> str:
    return escape(names.get(member_id, f"#{member_id}"))


def format_balance_detail(balance: Balance, names: Mapping[str, str], symbol: str = "$") -> list[str]:
    lines = []
    for other, amount in sorted(balance.owes.items()):
        lines.append(f"You owe {name_of(names, other)} {format_money(amount, symbol)}")
    for other, amount in sorted(balance.owed.items()):
        lines.append(f"{name_of(names, other)} owes you {format_money(amount, symbol)}")
    return lines


def format_expense_line(expense: Expense, names: Mapping[str, str], tz: ZoneInfo, symbol: str = "$") -> str:
    icon = CATEGORY_ICONS.get(expense.category, "💰")
    when = expense.date.astimezone(tz).strftime("%d %b") if expense.date else ""
    split = "custom split" if expense.custom_splits else f"split {len(set(expense.split_between))} ways"
    return (
        f"{icon} <b>{escape(expense.title)}</b> {format_money(expense.amount, symbol)}\n"
        f"    paid by {name_of(names, expense.paid_by)} · {split} {when}".rstrip()
    )


def format_ledger(
    ledger: HouseholdLedger,
    member_id: str,
    names: Mapping[str, str],
    tz: ZoneInfo,
    symbol: str = "$",
    limit: int = 20,
) -> str:
    header = f"<b>{escape(ledger.household.name)}</b> expenses\nTotal: {format_money(ledger.total_spent, symbol)}"
    balance = ledger.balance_for(member_id)
    if balance is not None:
        header += f" · Your balance: {format_signed(balance.net_balance, symbol)}"
    elif ledger.balances is None:
        header += "\n⚠️ Balances are unavailable right now, showing raw expenses."

    if not ledger.expenses:
        return f"{header}\n\nNo expenses yet. Add one with /addexpense."

    lines = [format_expense_line(expense, names, tz, symbol) for expense in ledger.expenses[:limit]]
    return "\n\n".join([header, *lines])


def format_balances(ledger: HouseholdLedger, member_id: str, names: Mapping[str, str], symbol: str = "$") -> str:
    balance = ledger.balance_for(member_id)
    if balance is None:
        return "⚠️ Unable to compute balances right now. Check /expenses for the raw list."

    lines = [f"<b>Your balance:</b> {format_net_balance(balance.net_balance, symbol)}"]
    detail = format_balance_detail(balance, names, symbol)
    if detail:
        lines.append("")
        lines.extend(detail)

    assert ledger.balances is not None
    others = [b for b in ledger.balances.values() if b.member_id != member_id]
    if others:
        lines.append("")
        lines.append("<b>Household</b>")
        for other in sorted(others, key=lambda b: b.net_balance, reverse=True):
            lines.append(f"{name_of(names, other.member_id)}: {format_signed(other.net_balance, symbol)}")
    return "\n".join(lines)


def format_chore_line(chore: Chore, names: Mapping[str, str], tz: ZoneInfo, now: Optional[datetime] = None) -> str:
    icon = "✅" if chore.completed else PRIORITY_ICONS.get(chore.priority, "•")
    due = chore.due_at.astimezone(tz).strftime("%d.%m %H:%M")
    line = f"{icon} #{chore.id} {escape(chore.title)} · {name_of(names, chore.assigned_to)} · {due}"
    if chore.recurring_interval:
        line += f" · {chore.recurring_interval.value}"
    if now is not None and chore.is_overdue(now):
        line += " · overdue"
    return line


def format_chores(chores: Iterable[Chore], names: Mapping[str, str], tz: ZoneInfo, now: datetime) -> str:
    chores = list(chores)
    if not chores:
        return "No chores yet. Add one with /addchore."
    return "\n".join(["<b>Chores</b>", *(format_chore_line(chore, names, tz, now) for chore in chores)])


def format_calendar_entry(entry: CalendarEntry, tz: ZoneInfo, symbol: str = "$") -> str:
    when = entry.when.astimezone(tz).strftime("%H:%M")
    if entry.entry_type == EntryType.CHORE:
        icon = PRIORITY_ICONS.get(entry.priority, "•") if entry.priority else "•"
        return f"  {icon} {when} {escape(entry.title)}"
    amount = format_money(entry.amount, symbol) if entry.amount is not None else ""
    return f"  💵 {when} {escape(entry.title)} {amount}".rstrip()


def format_calendar(
    groups: Iterable[tuple[date, list[CalendarEntry]]],
    today: date,
    tz: ZoneInfo,
    symbol: str = "$",
) -> str:
    lines = ["<b>Calendar</b>"]
    for day, entries in groups:
        lines.append("")
        lines.append(f"<b>{date_label(day, today)}</b>")
        lines.extend(format_calendar_entry(entry, tz, symbol) for entry in entries)
    if len(lines) == 1:
        lines.append("Nothing scheduled.")
    return "\n".join(lines)


def format_dashboard(stats: DashboardStats, household: Household, symbol: str = "$") -> str:
    lines = [
        f"🏠 <b>{escape(household.name)}</b> · {len(household.member_ids)} members",
        f"Invite code: <code>{household.invite_code}</code>",
        "",
        f"Pending chores: {stats.pending_count}",
        f"Your chores: {len(stats.my_chores)}",
        f"Completion rate: {stats.completion_rate:.0f}%",
    ]
    if stats.net_balance is None:
        lines.append("Balance: unavailable")
    else:
        lines.append(f"Balance: {format_net_balance(stats.net_balance, symbol)}")
    if stats.overdue_chores:
        lines.append("")
        lines.append("⚠️ <b>Overdue</b>")
        lines.extend(f"  • {escape(chore.title)}" for chore in stats.overdue_chores)
    return "\n".join(lines)
