from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from roomsync.db.models import Chore
from roomsync.services import chores as chore_rules
from roomsync.services.ledger import HouseholdLedger


@dataclass(slots=True)
class DashboardStats:
    pending_count: int
    my_chores: list[Chore] = field(default_factory=list)
    overdue_chores: list[Chore] = field(default_factory=list)
    completion_rate: float = 0.0
    net_balance: Optional[Decimal] = None


def build_dashboard(
    chores: Iterable[Chore],
    ledger: Optional[HouseholdLedger],
    member_id: str,
    now: datetime,
) -> DashboardStats:
    chores = list(chores)
    balance = ledger.balance_for(member_id) if ledger else None
    return DashboardStats(
        pending_count=len(chore_rules.pending(chores)),
        my_chores=chore_rules.assigned_to(chores, member_id),
        overdue_chores=chore_rules.overdue(chores, now),
        completion_rate=chore_rules.completion_rate(chores),
        net_balance=balance.net_balance if balance else None,
    )
