import logging
import sys

from botrouter.bot.handlers import CommandRouter
from botrouter.bot.telegram_bot import TelegramBot
from botrouter.config.config import get_settings
from botrouter.database.database_manager import DatabaseManager
from botrouter.exceptions import DuplicateCommandError
from botrouter.logger import setup_logger

logger = logging.getLogger(__name__)


def build_router(settings) -> CommandRouter:
    db = DatabaseManager.for_settings(settings)
    router = CommandRouter.from_database(db, settings.default_prefix)
    router.register_command(
        "prefix",
        "Change the command prefix for this group (administrators only)",
        router.system_commands.handle_set_prefix,
    )
    return router


def main():
    settings = get_settings()
    setup_logger("botrouter", settings.log_level, settings.log_dir)

    try:
        router = build_router(settings)
    except DuplicateCommandError as e:
        logger.error(f"Command registration failed: {e}")
        sys.exit(1)

    bot = TelegramBot(settings=settings)
    bot.attach_router(router)

    try:
        bot.start_polling()
    except KeyboardInterrupt:
        logger.info("🛑 Stopping bot gracefully...")
        bot.stop()
        logger.info("Bot stopped.")


if __name__ == "__main__":
    main()
