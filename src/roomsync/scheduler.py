from __future__ import annotations

from datetime import datetime, timezone

from aiogram import Bot
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from roomsync.config import Settings
from roomsync.db.repo import RoomSyncRepository
from roomsync.logging import get_logger
from roomsync.services.notify import chore_reminder_text, send_safely


async def setup_scheduler(bot: Bot, repo: RoomSyncRepository, settings: Settings) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(timezone=settings.tz)
    scheduler.add_job(
        reminder_job,
        IntervalTrigger(minutes=settings.reminder_interval_minutes),
        kwargs={"bot": bot, "repo": repo},
    )
    scheduler.start()
    return scheduler


async def reminder_job(bot: Bot, repo: RoomSyncRepository) -> None:
    log = get_logger(__name__)
    now = datetime.now(timezone.utc)
    rows = await repo.fetch_pending_reminders(now)

    for row in rows:
        log.info("reminder.send", reminder_id=row["id"], chore_id=row["chore_id"])
        tg_id = row["assignee_tg_id"]
        if tg_id:
            await send_safely(bot, tg_id, chore_reminder_text(row["title"]))
        await repo.mark_reminder_sent(row["id"])
