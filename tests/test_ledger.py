from decimal import Decimal

import pytest

from roomsync.db.models import Expense, Household, SplitType
from roomsync.services.ledger import load_household_ledger


class StubRepo:
    def __init__(self, household: Household | None, expenses: list[Expense]) -> None:
        self.household = household
        self.expenses = expenses

    async def list_household_expenses(self, household_id: int) -> list[Expense]:
        return self.expenses

    async def get_household(self, household_id: int) -> Household | None:
        return self.household


HOUSEHOLD = Household(id=1, name="Flat 4B", invite_code="ABC123", member_ids=("1", "2", "3"), created_by="1")


@pytest.mark.asyncio
async def test_ledger_computes_balances():
    expenses = [
        Expense(id="10", amount=Decimal("90.00"), paid_by="1", split_between=("1", "2", "3")),
        Expense(id="11", amount=Decimal("12.00"), paid_by="2", split_between=("1", "2")),
    ]
    ledger = await load_household_ledger(StubRepo(HOUSEHOLD, expenses), 1)

    assert ledger is not None
    assert ledger.total_spent == Decimal("102.00")
    assert ledger.error is None
    assert ledger.balance_for("1").net_balance == Decimal("54.00")
    assert ledger.balance_for("2").net_balance == Decimal("-24.00")
    assert ledger.balance_for("3").net_balance == Decimal("-30.00")


@pytest.mark.asyncio
async def test_ledger_falls_back_to_raw_expenses_on_invalid_split():
    broken = Expense(
        id="10",
        amount=Decimal("50.00"),
        paid_by="1",
        split_between=("1", "2"),
        split_type=SplitType.CUSTOM,
        custom_splits={},
    )
    ledger = await load_household_ledger(StubRepo(HOUSEHOLD, [broken]), 1)

    assert ledger is not None
    assert ledger.balances is None
    assert ledger.expenses == [broken]
    assert ledger.balance_for("1") is None
    assert "custom" in ledger.error


@pytest.mark.asyncio
async def test_ledger_flags_former_members():
    expense = Expense(id="10", amount=Decimal("20.00"), paid_by="1", split_between=("1", "99"))
    ledger = await load_household_ledger(StubRepo(HOUSEHOLD, [expense]), 1)

    assert ledger is not None
    assert ledger.balances is None
    assert "99" in ledger.error


@pytest.mark.asyncio
async def test_ledger_unknown_household():
    assert await load_household_ledger(StubRepo(None, []), 1) is None
