from __future__ import annotations

from datetime import datetime
from typing import Iterable, Protocol

from roomsync.db.models import Chore
from roomsync.logging import get_logger
from roomsync.services.authz import AuthorizationError


class ChoreRepository(Protocol):
    async def get_chore(self, chore_id: int) -> Chore | None: ...

    async def complete_chore(self, chore_id: int, completed_by: int) -> None: ...


class ChoreError(ValueError):
    pass


def pending(chores: Iterable[Chore]) -> list[Chore]:
    return [chore for chore in chores if not chore.completed]


def assigned_to(chores: Iterable[Chore], member_id: str) -> list[Chore]:
    return [chore for chore in pending(chores) if chore.assigned_to == member_id]


def overdue(chores: Iterable[Chore], now: datetime) -> list[Chore]:
    return [chore for chore in chores if chore.is_overdue(now)]


def completion_rate(chores: Iterable[Chore]) -> float:
    chores = list(chores)
    if not chores:
        return 0.0
    done = sum(1 for chore in chores if chore.completed)
    return done / len(chores) * 100


async def complete_chore(repo: ChoreRepository, chore_id: int, user_id: int, household_id: int) -> Chore:
    chore = await repo.get_chore(chore_id)
    if chore is None:
        raise ChoreError("Chore not found.")
    if chore.household_id != household_id:
        raise AuthorizationError("This chore belongs to another household.")
    if chore.completed:
        raise ChoreError("This chore is already done.")

    await repo.complete_chore(chore_id, user_id)
    get_logger(__name__).info("chore.completed", chore_id=chore_id, user_id=user_id)
    updated = await repo.get_chore(chore_id)
    assert updated is not None
    return updated
