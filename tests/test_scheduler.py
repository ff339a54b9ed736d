from datetime import datetime, timedelta, timezone

import pytest
from aiogram.exceptions import TelegramAPIError

from roomsync.scheduler import reminder_job


class StubBot:
    def __init__(self, failing: set[int] | None = None) -> None:
        self.sent: list[tuple[int, str]] = []
        self.failing = failing or set()

    async def send_message(self, chat_id: int, text: str):
        if chat_id in self.failing:
            raise TelegramAPIError(method=None, message="blocked")  # type: ignore[arg-type]
        self.sent.append((chat_id, text))


class StubRepo:
    def __init__(self, rows: list[dict]) -> None:
        self.rows = rows
        self.marked: list[int] = []
        self.asked_at: datetime | None = None

    async def fetch_pending_reminders(self, now: datetime) -> list[dict]:
        self.asked_at = now
        return [row for row in self.rows if row["remind_at"] <= now]

    async def mark_reminder_sent(self, reminder_id: int) -> None:
        self.marked.append(reminder_id)


def reminder(reminder_id: int, title: str, tg_id: int | None, minutes_ago: int = 5) -> dict:
    return {
        "id": reminder_id,
        "chore_id": reminder_id * 10,
        "remind_at": datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
        "title": title,
        "assignee_tg_id": tg_id,
    }


@pytest.mark.asyncio
async def test_reminder_job_sends_to_assignees_and_marks_sent():
    repo = StubRepo([reminder(1, "Dishes", 501), reminder(2, "Trash", 502)])
    bot = StubBot()

    await reminder_job(bot, repo)  # type: ignore[arg-type]

    assert [chat_id for chat_id, _ in bot.sent] == [501, 502]
    assert "Dishes is due today!" in bot.sent[0][1]
    assert repo.marked == [1, 2]
    assert repo.asked_at is not None and repo.asked_at.tzinfo is not None


@pytest.mark.asyncio
async def test_reminder_without_telegram_id_is_marked_but_not_sent():
    repo = StubRepo([reminder(1, "Dishes", None), reminder(2, "Trash", 502)])
    bot = StubBot()

    await reminder_job(bot, repo)  # type: ignore[arg-type]

    assert bot.sent == [(502, bot.sent[0][1])]
    assert repo.marked == [1, 2]


@pytest.mark.asyncio
async def test_reminder_send_failure_does_not_stop_job():
    repo = StubRepo([reminder(1, "Dishes", 501), reminder(2, "Trash", 502)])
    bot = StubBot(failing={501})

    await reminder_job(bot, repo)  # type: ignore[arg-type]

    assert [chat_id for chat_id, _ in bot.sent] == [502]
    assert repo.marked == [1, 2]


@pytest.mark.asyncio
async def test_future_reminders_are_left_alone():
    repo = StubRepo([reminder(1, "Dishes", 501, minutes_ago=-60)])
    bot = StubBot()

    await reminder_job(bot, repo)  # type: ignore[arg-type]

    assert bot.sent == []
    assert repo.marked == []
