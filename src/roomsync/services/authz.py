from __future__ import annotations

from typing import Optional

from roomsync.db.models import Household, User


class AuthorizationError(PermissionError):
    pass


def require_household(user: User) -> int:
    if user.household_id is None:
        raise AuthorizationError("You haven't joined a household yet. Use /newhousehold or /join.")
    return user.household_id


def assert_household_member(household: Optional[Household], member_id: str) -> Household:
    if household is None or member_id not in household.member_ids:
        raise AuthorizationError("You are not a member of this household.")
    return household
