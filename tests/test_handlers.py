from types import SimpleNamespace
from zoneinfo import ZoneInfo

import pytest

from roomsync.db.models import Household, User
from roomsync.handlers.chores import cmd_addchore
from roomsync.handlers.expenses import cmd_addexpense

HOUSEHOLD = Household(id=1, name="Flat", invite_code="ABC123", member_ids=("1", "2"), created_by="1")
SETTINGS = SimpleNamespace(zoneinfo=ZoneInfo("UTC"), currency_symbol="$")


class StubRepo:
    async def ensure_user(self, tg_id: int, username, full_name) -> User:
        return User(id=1, tg_id=tg_id, username=username, full_name=full_name, household_id=1)

    async def get_household(self, household_id: int) -> Household | None:
        return HOUSEHOLD if household_id == HOUSEHOLD.id else None

    async def get_user_by_username(self, username: str) -> User | None:
        return None


class StubMessage:
    def __init__(self, text: str) -> None:
        self.text = text
        self.from_user = SimpleNamespace(id=100, username="alice", full_name="Alice")
        self.answers: list[str] = []

    async def answer(self, text: str, **kwargs) -> None:
        self.answers.append(text)


def assert_no_raw_tags(text: str) -> None:
    stripped = text.replace("<b>", "").replace("</b>", "")
    assert "<" not in stripped and ">" not in stripped


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "text",
    [
        "/addexpense",
        "/addexpense 10 | Milk | food | @a=<i>",
        "/addexpense 10 | Milk | food | <script>",
        "/addexpense <b | Milk",
    ],
)
async def test_addexpense_errors_are_html_safe(text):
    message = StubMessage(text)

    await cmd_addexpense(message, StubRepo(), SETTINGS, bot=None)  # type: ignore[arg-type]

    assert len(message.answers) == 1
    assert message.answers[0].startswith("❌")
    assert_no_raw_tags(message.answers[0])


@pytest.mark.asyncio
async def test_addexpense_usage_is_escaped():
    message = StubMessage("/addexpense")

    await cmd_addexpense(message, StubRepo(), SETTINGS, bot=None)  # type: ignore[arg-type]

    assert "&lt;amount&gt; | &lt;title&gt;" in message.answers[0]


@pytest.mark.asyncio
async def test_addexpense_unknown_username_is_escaped():
    message = StubMessage("/addexpense 10 | Milk | food | @bob=10")

    await cmd_addexpense(message, StubRepo(), SETTINGS, bot=None)  # type: ignore[arg-type]

    assert message.answers == ["❌ @bob is not in this household."]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "text",
    [
        "/addchore",
        "/addchore Dishes | <tomorrow>",
        "/addchore Dishes | 2026-10-20 | | <urgent>",
    ],
)
async def test_addchore_errors_are_html_safe(text):
    message = StubMessage(text)

    await cmd_addchore(message, StubRepo(), SETTINGS)  # type: ignore[arg-type]

    assert len(message.answers) == 1
    assert message.answers[0].startswith("❌")
    assert_no_raw_tags(message.answers[0])


@pytest.mark.asyncio
async def test_addchore_usage_is_escaped():
    message = StubMessage("/addchore")

    await cmd_addchore(message, StubRepo(), SETTINGS)  # type: ignore[arg-type]

    assert "&lt;title&gt; | &lt;YYYY-MM-DD [HH:MM]&gt;" in message.answers[0]
