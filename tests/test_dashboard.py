from datetime import datetime, timedelta, timezone
from decimal import Decimal

from roomsync.db.models import Chore, Expense, Household
from roomsync.services.balances import compute_balances
from roomsync.services.dashboard import build_dashboard
from roomsync.services.ledger import HouseholdLedger

NOW = datetime(2026, 4, 1, 12, 0, tzinfo=timezone.utc)
HOUSEHOLD = Household(id=1, name="Flat", invite_code="ABC123", member_ids=("1", "2"), created_by="1")


def chore(chore_id: int, assignee: str, days: int, completed: bool = False) -> Chore:
    return Chore(
        id=chore_id,
        household_id=1,
        title="chore",
        assigned_to=assignee,
        assigned_by="1",
        due_at=NOW + timedelta(days=days),
        completed=completed,
    )


def test_build_dashboard():
    chores = [chore(1, "1", -1), chore(2, "2", 1), chore(3, "1", 2), chore(4, "2", -2, completed=True)]
    expenses = [Expense(id="1", amount=Decimal("40.00"), paid_by="2", split_between=("1", "2"))]
    ledger = HouseholdLedger(HOUSEHOLD, expenses, compute_balances(expenses, HOUSEHOLD.member_ids))

    stats = build_dashboard(chores, ledger, "1", NOW)

    assert stats.pending_count == 3
    assert [c.id for c in stats.my_chores] == [1, 3]
    assert [c.id for c in stats.overdue_chores] == [1]
    assert stats.completion_rate == 25.0
    assert stats.net_balance == Decimal("-20.00")


def test_build_dashboard_without_balances():
    ledger = HouseholdLedger(HOUSEHOLD, [], None, error="broken")

    stats = build_dashboard([], ledger, "1", NOW)

    assert stats.pending_count == 0
    assert stats.completion_rate == 0.0
    assert stats.net_balance is None
