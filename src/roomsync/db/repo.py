from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Optional

import asyncpg

from roomsync.db.models import (
    Chore,
    ChorePriority,
    Expense,
    ExpenseCategory,
    Household,
    RecurringInterval,
    SplitType,
    User,
)
from roomsync.logging import get_logger, sql_logger
from roomsync.services.split import to_cents


class Database:
    def __init__(self, dsn: str) -> None:
        self._dsn = dsn
        self._pool: asyncpg.Pool | None = None
        self._log = get_logger(__name__)

    async def connect(self) -> None:
        if self._pool is None:
            # asyncpg expects a plain postgresql:// scheme, without "+asyncpg"
            dsn = self._dsn.replace("+asyncpg", "")
            self._pool = await asyncpg.create_pool(dsn)
            self._log.info("db.pool.created")

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            self._log.info("db.pool.closed")

    async def fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        await self._ensure_pool()
        assert self._pool
        sql_logger.info("sql.fetch", query=query, args=args)
        return await self._pool.fetch(query, *args)

    async def fetchrow(self, query: str, *args: Any) -> asyncpg.Record | None:
        await self._ensure_pool()
        assert self._pool
        sql_logger.info("sql.fetchrow", query=query, args=args)
        return await self._pool.fetchrow(query, *args)

    async def fetchval(self, query: str, *args: Any) -> Any:
        await self._ensure_pool()
        assert self._pool
        sql_logger.info("sql.fetchval", query=query, args=args)
        return await self._pool.fetchval(query, *args)

    async def execute(self, query: str, *args: Any) -> str:
        await self._ensure_pool()
        assert self._pool
        sql_logger.info("sql.execute", query=query, args=args)
        return await self._pool.execute(query, *args)

    async def _ensure_pool(self) -> None:
        if self._pool is None:
            await self.connect()


def _money(value: Any, what: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"{what} is not a number: {value!r}") from exc
    to_cents(amount)
    return amount


def user_from_row(row: Mapping[str, Any]) -> User:
    return User(
        id=int(row["id"]),
        tg_id=int(row["tg_id"]),
        username=row.get("username"),
        full_name=row.get("full_name"),
        household_id=row.get("household_id"),
    )


def household_from_row(row: Mapping[str, Any]) -> Household:
    return Household(
        id=int(row["id"]),
        name=row["name"],
        invite_code=row["invite_code"],
        member_ids=tuple(str(member) for member in (row.get("member_ids") or [])),
        created_by=str(row["created_by"]),
        created_at=row.get("created_at"),
    )


def expense_from_row(row: Mapping[str, Any]) -> Expense:
    """Validate a stored expense row into an ``Expense`` record.

    Raises ``ValueError`` for rows that could never be split: a non-positive
    amount, fractional cents, no participants or an unknown split type.
    """
    expense_id = str(row["id"])
    amount = _money(row["amount"], f"expense {expense_id} amount")
    if amount <= 0:
        raise ValueError(f"expense {expense_id} amount must be positive")

    split_between = tuple(str(member) for member in (row.get("split_between") or []))
    if not split_between:
        raise ValueError(f"expense {expense_id} has no participants")

    split_type = SplitType(row["split_type"])

    raw_custom = row.get("custom_splits")
    if isinstance(raw_custom, str):
        raw_custom = json.loads(raw_custom)
    custom_splits: Optional[dict[str, Decimal]] = None
    if raw_custom is not None:
        custom_splits = {
            str(member): _money(share, f"expense {expense_id} share of {member}")
            for member, share in raw_custom.items()
        }

    return Expense(
        id=expense_id,
        amount=amount,
        paid_by=str(row["paid_by"]),
        split_between=split_between,
        split_type=split_type,
        custom_splits=custom_splits,
        household_id=row.get("household_id"),
        title=row.get("title") or "",
        description=row.get("description") or "",
        category=ExpenseCategory(row.get("category") or ExpenseCategory.OTHER.value),
        date=row.get("date"),
        created_at=row.get("created_at"),
    )


def chore_from_row(row: Mapping[str, Any]) -> Chore:
    interval = row.get("recurring_interval")
    completed_by = row.get("completed_by")
    return Chore(
        id=int(row["id"]),
        household_id=int(row["household_id"]),
        title=row["title"],
        description=row.get("description") or "",
        assigned_to=str(row["assigned_to"]),
        assigned_by=str(row["assigned_by"]),
        due_at=row["due_at"],
        priority=ChorePriority(row.get("priority") or ChorePriority.MEDIUM.value),
        recurring=bool(row.get("recurring")),
        recurring_interval=RecurringInterval(interval) if interval else None,
        completed=bool(row.get("completed")),
        completed_at=row.get("completed_at"),
        completed_by=str(completed_by) if completed_by is not None else None,
        created_at=row.get("created_at"),
    )


_HOUSEHOLD_SELECT = """
    SELECT h.*,
           COALESCE(
               array_agg(hm.user_id ORDER BY hm.joined_at) FILTER (WHERE hm.user_id IS NOT NULL),
               '{}'
           ) AS member_ids
    FROM households h
    LEFT JOIN household_members hm ON hm.household_id = h.id
"""


class RoomSyncRepository:
    CHORE_FIELDS = {"title", "description", "assigned_to", "due_at", "priority", "recurring", "recurring_interval"}

    def __init__(self, db: Database) -> None:
        self.db = db

    # users

    async def ensure_user(self, tg_id: int, username: Optional[str], full_name: Optional[str]) -> User:
        row = await self.db.fetchrow(
            """
            INSERT INTO users (tg_id, username, full_name)
            VALUES ($1, $2, $3)
            ON CONFLICT (tg_id) DO UPDATE
                SET username = EXCLUDED.username,
                    full_name = EXCLUDED.full_name
            RETURNING *
            """,
            tg_id,
            username,
            full_name,
        )
        assert row is not None
        return user_from_row(row)

    async def get_user(self, user_id: int) -> User | None:
        row = await self.db.fetchrow("SELECT * FROM users WHERE id = $1", user_id)
        return user_from_row(row) if row else None

    async def get_user_by_username(self, username: str) -> User | None:
        clean = username.lstrip("@")
        row = await self.db.fetchrow("SELECT * FROM users WHERE username = $1", clean)
        return user_from_row(row) if row else None

    async def list_users(self, user_ids: Iterable[str]) -> list[User]:
        ids = [int(user_id) for user_id in user_ids]
        rows = await self.db.fetch("SELECT * FROM users WHERE id = ANY($1::bigint[]) ORDER BY id", ids)
        return [user_from_row(row) for row in rows]

    async def set_user_household(self, user_id: int, household_id: int) -> None:
        await self.db.execute("UPDATE users SET household_id = $1 WHERE id = $2", household_id, user_id)

    # households

    async def create_household(self, name: str, invite_code: str, creator_id: int) -> Household:
        row = await self.db.fetchrow(
            """
            INSERT INTO households (name, invite_code, created_by)
            VALUES ($1, $2, $3)
            RETURNING id
            """,
            name,
            invite_code,
            creator_id,
        )
        assert row is not None
        household_id = int(row["id"])
        await self.add_household_member(household_id, creator_id)
        household = await self.get_household(household_id)
        assert household is not None
        return household

    async def get_household(self, household_id: int) -> Household | None:
        row = await self.db.fetchrow(f"{_HOUSEHOLD_SELECT} WHERE h.id = $1 GROUP BY h.id", household_id)
        return household_from_row(row) if row else None

    async def get_household_by_invite_code(self, invite_code: str) -> Household | None:
        row = await self.db.fetchrow(
            f"{_HOUSEHOLD_SELECT} WHERE h.invite_code = $1 GROUP BY h.id",
            invite_code.upper(),
        )
        return household_from_row(row) if row else None

    async def add_household_member(self, household_id: int, user_id: int) -> None:
        await self.db.execute(
            """
            INSERT INTO household_members (household_id, user_id)
            VALUES ($1, $2)
            ON CONFLICT DO NOTHING
            """,
            household_id,
            user_id,
        )
        await self.set_user_household(user_id, household_id)

    # expenses

    async def create_expense(
        self,
        household_id: int,
        paid_by: int,
        title: str,
        amount: Decimal,
        split_between: Iterable[str],
        split_type: SplitType = SplitType.EQUAL,
        custom_splits: Optional[Mapping[str, Decimal]] = None,
        category: ExpenseCategory = ExpenseCategory.OTHER,
        description: str = "",
        date: Optional[datetime] = None,
    ) -> Expense:
        custom_json = None
        if custom_splits is not None:
            custom_json = json.dumps({str(member): str(share) for member, share in custom_splits.items()})
        row = await self.db.fetchrow(
            """
            INSERT INTO expenses (
                household_id, paid_by, title, description, amount, category,
                date, split_between, split_type, custom_splits
            )
            VALUES ($1, $2, $3, $4, $5, $6, COALESCE($7, now()), $8::bigint[], $9, $10::jsonb)
            RETURNING *
            """,
            household_id,
            paid_by,
            title,
            description,
            amount,
            category.value,
            date,
            [int(member) for member in split_between],
            split_type.value,
            custom_json,
        )
        assert row is not None
        return expense_from_row(row)

    async def list_household_expenses(self, household_id: int) -> list[Expense]:
        rows = await self.db.fetch(
            """
            SELECT * FROM expenses
            WHERE household_id = $1
            ORDER BY date DESC, id DESC
            """,
            household_id,
        )
        return [expense_from_row(row) for row in rows]

    # chores

    async def create_chore(
        self,
        household_id: int,
        title: str,
        assigned_to: int,
        assigned_by: int,
        due_at: datetime,
        description: str = "",
        priority: ChorePriority = ChorePriority.MEDIUM,
        recurring_interval: Optional[RecurringInterval] = None,
    ) -> Chore:
        row = await self.db.fetchrow(
            """
            INSERT INTO chores (
                household_id, title, description, assigned_to, assigned_by,
                due_at, priority, recurring, recurring_interval
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
            RETURNING *
            """,
            household_id,
            title,
            description,
            assigned_to,
            assigned_by,
            due_at,
            priority.value,
            recurring_interval is not None,
            recurring_interval.value if recurring_interval else None,
        )
        assert row is not None
        await self.create_reminder(int(row["id"]), due_at)
        return chore_from_row(row)

    async def get_chore(self, chore_id: int) -> Chore | None:
        row = await self.db.fetchrow("SELECT * FROM chores WHERE id = $1", chore_id)
        return chore_from_row(row) if row else None

    async def list_household_chores(self, household_id: int) -> list[Chore]:
        rows = await self.db.fetch(
            "SELECT * FROM chores WHERE household_id = $1 ORDER BY due_at, id",
            household_id,
        )
        return [chore_from_row(row) for row in rows]

    async def complete_chore(self, chore_id: int, completed_by: int) -> None:
        await self.db.execute(
            """
            UPDATE chores
            SET completed = true, completed_at = now(), completed_by = $2
            WHERE id = $1
            """,
            chore_id,
            completed_by,
        )

    async def update_chore_field(self, chore_id: int, field: str, value: Any) -> None:
        if field not in self.CHORE_FIELDS:
            raise ValueError(f"chore field cannot be updated: {field}")
        await self.db.execute(f"UPDATE chores SET {field} = $1 WHERE id = $2", value, chore_id)

    # reminders

    async def create_reminder(self, chore_id: int, remind_at: datetime) -> None:
        await self.db.execute(
            """
            INSERT INTO reminders (chore_id, remind_at)
            VALUES ($1, $2)
            ON CONFLICT DO NOTHING
            """,
            chore_id,
            remind_at,
        )

    async def fetch_pending_reminders(self, now: datetime) -> list[asyncpg.Record]:
        return await self.db.fetch(
            """
            SELECT r.id, r.chore_id, r.remind_at, c.title, c.due_at, u.tg_id AS assignee_tg_id
            FROM reminders r
            JOIN chores c ON c.id = r.chore_id
            JOIN users u ON u.id = c.assigned_to
            WHERE r.sent = false
              AND r.remind_at <= $1
              AND c.completed = false
            """,
            now,
        )

    async def mark_reminder_sent(self, reminder_id: int) -> None:
        await self.db.execute("UPDATE reminders SET sent = true WHERE id = $1", reminder_id)
