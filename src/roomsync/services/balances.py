"""Who owes whom inside a household.

``compute_balances`` is a pure function: it takes a snapshot of a household's
expenses plus its member ids and rebuilds every member's ledger from scratch.
Amounts are two-place ``Decimal`` values, so every addition is exact and each
member's ``net_balance`` always equals ``sum(owed) - sum(owes)``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable, Mapping

from roomsync.db.models import Expense, SplitType
from roomsync.services.split import split_equally, to_cents

ZERO = Decimal("0.00")


class BalanceError(ValueError):
    """An expense violates the input contract of the balance computation."""


class InvalidSplitError(BalanceError):
    pass


class UnknownMemberError(BalanceError):
    pass


class DivisionDegenerateError(BalanceError):
    pass


@dataclass(slots=True)
class Balance:
    member_id: str
    owes: dict[str, Decimal] = field(default_factory=dict)
    owed: dict[str, Decimal] = field(default_factory=dict)
    net_balance: Decimal = ZERO

    @property
    def total_owes(self) -> Decimal:
        return sum(self.owes.values(), ZERO)

    @property
    def total_owed(self) -> Decimal:
        return sum(self.owed.values(), ZERO)


def _participants(expense: Expense) -> tuple[str, ...]:
    # split_between is a set of members; duplicates collapse
    return tuple(dict.fromkeys(expense.split_between))


def expense_shares(expense: Expense) -> dict[str, Decimal]:
    """Return the amount each participant of ``expense`` is responsible for.

    Custom shares must cover exactly the participants and add up to
    ``expense.amount``; anything else is an ``InvalidSplitError``.
    """
    participants = _participants(expense)

    if expense.split_type == SplitType.EQUAL:
        if expense.custom_splits:
            raise InvalidSplitError(f"expense {expense.id}: equal split must not carry custom splits")
        if not participants:
            raise DivisionDegenerateError(f"expense {expense.id}: equal split with no participants")
        try:
            return split_equally(expense.amount, participants)
        except ValueError as exc:
            raise InvalidSplitError(f"expense {expense.id}: {exc}") from exc

    if not expense.custom_splits:
        raise InvalidSplitError(f"expense {expense.id}: custom split without any custom amounts")

    custom = dict(expense.custom_splits)
    if participants and set(custom) != set(participants):
        missing = sorted(set(participants) - set(custom))
        extra = sorted(set(custom) - set(participants))
        raise InvalidSplitError(
            f"expense {expense.id}: custom splits do not cover the participants "
            f"(missing={missing}, extra={extra})"
        )
    for member_id, share in custom.items():
        if share < 0:
            raise InvalidSplitError(f"expense {expense.id}: negative share for {member_id}")
        try:
            to_cents(share)
        except ValueError as exc:
            raise InvalidSplitError(f"expense {expense.id}: {exc}") from exc
    if sum(custom.values(), ZERO) != expense.amount:
        raise InvalidSplitError(f"expense {expense.id}: custom splits do not add up to {expense.amount}")
    return custom


def _check_members(expense: Expense, shares: Mapping[str, Decimal], members: Mapping[str, Balance]) -> None:
    unknown = sorted({expense.paid_by, *shares} - set(members))
    if unknown:
        raise UnknownMemberError(f"expense {expense.id} references unknown members: {unknown}")


def _add(target: dict[str, Decimal], key: str, amount: Decimal) -> None:
    target[key] = target.get(key, ZERO) + amount


def compute_balances(expenses: Iterable[Expense], member_ids: Iterable[str]) -> dict[str, Balance]:
    balances = {member_id: Balance(member_id=member_id) for member_id in member_ids}

    for expense in expenses:
        shares = expense_shares(expense)
        _check_members(expense, shares, balances)
        payer = expense.paid_by
        for member_id, share in shares.items():
            if member_id == payer or share == 0:
                continue
            _add(balances[member_id].owes, payer, share)
            _add(balances[payer].owed, member_id, share)

    for balance in balances.values():
        balance.net_balance = balance.total_owed - balance.total_owes

    return balances
