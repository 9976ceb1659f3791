"""Main entry point for Exam Coach Bot."""
import asyncio
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from aiogram import Bot, Dispatcher
from aiogram.fsm.storage.memory import MemoryStorage
from aiogram.types import BotCommand

from exam_bot.config import settings
from exam_bot.core import database

# Import handlers
from exam_bot.handlers import generate, quiz, start


def setup_logging():
    """Log to stdout and to a rotating file."""
    handlers = [logging.StreamHandler(sys.stdout)]
    if settings.LOG_FILE:
        Path(settings.LOG_FILE).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(settings.LOG_FILE, maxBytes=5_000_000, backupCount=3, encoding="utf-8")
        )

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
    )


logger = logging.getLogger(__name__)


async def main():
    """Main function to start the bot."""
    if not settings.BOT_TOKEN:
        logger.error("BOT_TOKEN is not set. Create a .env file from .env.example")
        sys.exit(1)

    logger.info("Starting Exam Coach Bot...")

    # Initialize database
    logger.info(f"Initializing database at {settings.DATABASE_PATH}")
    db = await database.init_database(settings.DATABASE_PATH)
    database.db = db  # Set global instance

    # Initialize bot and dispatcher
    bot = Bot(token=settings.BOT_TOKEN)
    dp = Dispatcher(storage=MemoryStorage())

    # Register routers (generate first: it blocks all buttons while generating)
    dp.include_router(generate.router)
    dp.include_router(start.router)
    dp.include_router(quiz.router)

    await bot.set_my_commands([
        BotCommand(command="start", description="Home"),
    ])

    logger.info("Bot handlers registered successfully")

    # Start polling
    try:
        logger.info("Starting bot polling...")
        await dp.start_polling(
            bot,
            allowed_updates=dp.resolve_used_update_types()
        )
    except Exception as e:
        logger.error(f"Error during polling: {e}")
        raise
    finally:
        # Cleanup
        await bot.session.close()
        await db.close()
        database.db = None
        logger.info("Bot stopped")


def run():
    setup_logging()
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run()
