from __future__ import annotations

import secrets
import string
from typing import Protocol

import asyncpg

from roomsync.db.models import Household
from roomsync.logging import get_logger

INVITE_CODE_ALPHABET = string.ascii_uppercase + string.digits
INVITE_CODE_LENGTH = 6
MAX_CODE_ATTEMPTS = 5


class HouseholdRepository(Protocol):
    async def create_household(self, name: str, invite_code: str, creator_id: int) -> Household: ...

    async def get_household(self, household_id: int) -> Household | None: ...

    async def get_household_by_invite_code(self, invite_code: str) -> Household | None: ...

    async def add_household_member(self, household_id: int, user_id: int) -> None: ...


class HouseholdError(ValueError):
    pass


class InvalidInviteCodeError(HouseholdError):
    pass


class AlreadyMemberError(HouseholdError):
    pass


def generate_invite_code() -> str:
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(INVITE_CODE_LENGTH))


async def create_household(repo: HouseholdRepository, name: str, creator_id: int) -> Household:
    name = name.strip()
    if not name:
        raise HouseholdError("Household name must not be empty.")

    log = get_logger(__name__)
    for attempt in range(1, MAX_CODE_ATTEMPTS + 1):
        code = generate_invite_code()
        try:
            household = await repo.create_household(name, code, creator_id)
        except asyncpg.UniqueViolationError:
            log.info("household.invite_code.collision", attempt=attempt)
            continue
        log.info("household.created", household_id=household.id, creator_id=creator_id)
        return household
    raise HouseholdError("Could not allocate an invite code, try again.")


async def join_household(repo: HouseholdRepository, invite_code: str, user_id: int) -> Household:
    household = await repo.get_household_by_invite_code(invite_code.strip().upper())
    if household is None:
        raise InvalidInviteCodeError("Invalid invite code.")
    if str(user_id) in household.member_ids:
        raise AlreadyMemberError("You are already a member of this household.")

    await repo.add_household_member(household.id, user_id)
    get_logger(__name__).info("household.joined", household_id=household.id, user_id=user_id)
    joined = await repo.get_household(household.id)
    assert joined is not None
    return joined
