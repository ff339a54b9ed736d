from __future__ import annotations

import asyncio

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from roomsync.config import get_settings
from roomsync.db.repo import Database, RoomSyncRepository
from roomsync.handlers import basic_router, calendar_router, chores_router, expenses_router
from roomsync.logging import configure_logging, get_logger
from roomsync.scheduler import setup_scheduler


async def main() -> None:
    configure_logging()
    settings = get_settings()
    bot = Bot(token=settings.bot_token, default=DefaultBotProperties(parse_mode=ParseMode.HTML))
    db = Database(settings.database_url)
    await db.connect()
    repo = RoomSyncRepository(db)

    # repo and settings reach handlers as keyword arguments
    dp = Dispatcher(repo=repo, settings=settings)
    dp.include_router(basic_router)
    dp.include_router(expenses_router)
    dp.include_router(chores_router)
    dp.include_router(calendar_router)

    scheduler = await setup_scheduler(bot, repo, settings)

    log = get_logger(__name__)
    log.info("bot.start")
    try:
        await dp.start_polling(bot)
    finally:
        scheduler.shutdown(wait=False)
        await db.close()
        await bot.session.close()
        log.info("bot.stop")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
