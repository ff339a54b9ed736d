from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Mapping, Optional


class SplitType(str, Enum):
    EQUAL = "equal"
    CUSTOM = "custom"


class ExpenseCategory(str, Enum):
    FOOD = "food"
    UTILITIES = "utilities"
    RENT = "rent"
    GROCERIES = "groceries"
    ENTERTAINMENT = "entertainment"
    OTHER = "other"


class ChorePriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RecurringInterval(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


@dataclass(slots=True)
class User:
    id: int
    tg_id: int
    username: Optional[str]
    full_name: Optional[str]
    household_id: Optional[int] = None

    @property
    def member_id(self) -> str:
        return str(self.id)

    @property
    def display_name(self) -> str:
        if self.username:
            return f"@{self.username}"
        return self.full_name or f"#{self.id}"


@dataclass(slots=True, frozen=True)
class Household:
    id: int
    name: str
    invite_code: str
    member_ids: tuple[str, ...]
    created_by: str
    created_at: Optional[datetime] = None


@dataclass(slots=True, frozen=True)
class Expense:
    """A shared cost paid by one member and split among several.

    ``custom_splits`` is set only for ``SplitType.CUSTOM`` expenses.
    """

    id: str
    amount: Decimal
    paid_by: str
    split_between: tuple[str, ...]
    split_type: SplitType = SplitType.EQUAL
    custom_splits: Optional[Mapping[str, Decimal]] = None
    household_id: Optional[int] = None
    title: str = ""
    description: str = ""
    category: ExpenseCategory = ExpenseCategory.OTHER
    date: Optional[datetime] = None
    created_at: Optional[datetime] = None


@dataclass(slots=True)
class Chore:
    id: int
    household_id: int
    title: str
    assigned_to: str
    assigned_by: str
    due_at: datetime
    description: str = ""
    priority: ChorePriority = ChorePriority.MEDIUM
    recurring: bool = False
    recurring_interval: Optional[RecurringInterval] = None
    completed: bool = False
    completed_at: Optional[datetime] = None
    completed_by: Optional[str] = None
    created_at: Optional[datetime] = None

    def is_overdue(self, now: datetime) -> bool:
        return not self.completed and self.due_at < now

