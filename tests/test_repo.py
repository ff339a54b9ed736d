import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from roomsync.db.models import ChorePriority, SplitType
from roomsync.db.repo import RoomSyncRepository, chore_from_row, expense_from_row, household_from_row


def expense_row(**overrides):
    row = {
        "id": 3,
        "household_id": 1,
        "paid_by": 10,
        "title": "Rent",
        "description": None,
        "amount": Decimal("1200.00"),
        "category": "rent",
        "date": datetime(2026, 1, 1, tzinfo=timezone.utc),
        "split_between": [10, 11],
        "split_type": "equal",
        "custom_splits": None,
        "created_at": None,
    }
    row.update(overrides)
    return row


def test_expense_from_row_equal():
    expense = expense_from_row(expense_row())

    assert expense.id == "3"
    assert expense.paid_by == "10"
    assert expense.split_between == ("10", "11")
    assert expense.split_type == SplitType.EQUAL
    assert expense.custom_splits is None
    assert expense.description == ""


def test_expense_from_row_custom_json():
    row = expense_row(split_type="custom", custom_splits=json.dumps({"10": "700.00", "11": "500"}))

    expense = expense_from_row(row)

    assert expense.custom_splits == {"10": Decimal("700.00"), "11": Decimal("500")}


@pytest.mark.parametrize(
    "overrides",
    [
        {"amount": Decimal("0")},
        {"amount": Decimal("-5")},
        {"amount": Decimal("1.005")},
        {"split_between": []},
        {"split_type": "ratio"},
        {"split_type": "custom", "custom_splits": {"10": "abc"}},
    ],
)
def test_expense_from_row_rejects_malformed(overrides):
    with pytest.raises(ValueError):
        expense_from_row(expense_row(**overrides))


def test_household_from_row():
    household = household_from_row(
        {"id": 1, "name": "Flat", "invite_code": "ABC123", "member_ids": [10, 11], "created_by": 10}
    )
    assert household.member_ids == ("10", "11")
    assert household.created_by == "10"


def test_chore_from_row_defaults():
    chore = chore_from_row(
        {
            "id": 2,
            "household_id": 1,
            "title": "Dishes",
            "assigned_to": 10,
            "assigned_by": 11,
            "due_at": datetime(2026, 1, 1, tzinfo=timezone.utc),
        }
    )
    assert chore.assigned_to == "10"
    assert chore.priority == ChorePriority.MEDIUM
    assert chore.recurring_interval is None
    assert chore.completed_by is None


class RecordingDB:
    def __init__(self) -> None:
        self.executed: list[tuple[str, tuple]] = []

    async def execute(self, query: str, *args):
        self.executed.append((query, args))
        return "UPDATE 1"


@pytest.mark.asyncio
async def test_update_chore_field_whitelist():
    db = RecordingDB()
    repo = RoomSyncRepository(db)  # type: ignore[arg-type]

    await repo.update_chore_field(2, "title", "Laundry")
    assert db.executed[0][1] == ("Laundry", 2)

    with pytest.raises(ValueError):
        await repo.update_chore_field(2, "household_id; DROP TABLE chores", 1)
