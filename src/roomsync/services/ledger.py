from __future__ import annotations

import asyncio
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Protocol

from roomsync.db.models import Expense, Household
from roomsync.logging import get_logger
from roomsync.services.balances import ZERO, Balance, BalanceError, compute_balances


class LedgerRepository(Protocol):
    async def list_household_expenses(self, household_id: int) -> list[Expense]: ...

    async def get_household(self, household_id: int) -> Household | None: ...


@dataclass(slots=True)
class HouseholdLedger:
    household: Household
    expenses: list[Expense]
    balances: Optional[dict[str, Balance]]
    error: Optional[str] = None

    @property
    def total_spent(self) -> Decimal:
        return sum((expense.amount for expense in self.expenses), ZERO)

    def balance_for(self, member_id: str) -> Balance | None:
        if self.balances is None:
            return None
        return self.balances.get(member_id)


async def load_household_ledger(repo: LedgerRepository, household_id: int) -> HouseholdLedger | None:
    """Fetch expenses and membership together, then derive balances.

    Invalid expense data leaves ``balances`` unset so callers can still show
    the raw expense list.
    """
    log = get_logger(__name__)
    expenses, household = await asyncio.gather(
        repo.list_household_expenses(household_id),
        repo.get_household(household_id),
    )
    if household is None:
        return None

    try:
        balances = compute_balances(expenses, household.member_ids)
    except BalanceError as exc:
        log.warning("ledger.balances.failed", household_id=household_id, error=str(exc))
        return HouseholdLedger(household=household, expenses=expenses, balances=None, error=str(exc))

    return HouseholdLedger(household=household, expenses=expenses, balances=balances)
