import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from telegram import Update
from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from src.config import (
    API_TIMEOUT_SECONDS,
    EXPENSES_API_URL,
    LOG_DIR,
    LOG_LEVEL,
    TELEGRAM_BOT_TOKEN,
)
from src.bot.conversation import ConversationEngine
from src.bot.handlers.callbacks import category_callback, menu_callback
from src.bot.handlers.common import ENGINE_KEY
from src.bot.handlers.menu import cancel_command, start_command
from src.bot.handlers.text import text_message_handler
from src.services.expenses_api import ExpensesApi
from src.services.http_client import ApiTransport
from src.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Логирует необработанные исключения из хендлеров."""
    logger.error(f"Unhandled error while processing {update}", exc_info=context.error)

    if isinstance(update, Update) and update.effective_message:
        try:
            await update.effective_message.reply_text("⚠️ Что-то пошло не так. Попробуйте ещё раз.")
        except Exception as e:
            logger.warning(f"Could not notify user about error: {e}")


async def close_api(application: Application) -> None:
    await application.bot_data[ENGINE_KEY].api.close()
    logger.info("Expenses API client closed")


def build_application(token: str) -> Application:
    api = ExpensesApi(ApiTransport(EXPENSES_API_URL, timeout=API_TIMEOUT_SECONDS))

    application = (
        Application.builder()
        .token(token)
        .concurrent_updates(True)
        .post_shutdown(close_api)
        .build()
    )
    application.bot_data[ENGINE_KEY] = ConversationEngine(api)

    application.add_handler(CommandHandler("start", start_command))
    application.add_handler(CommandHandler("cancel", cancel_command))

    application.add_handler(CallbackQueryHandler(menu_callback, pattern=r"^menu:"))
    application.add_handler(CallbackQueryHandler(category_callback, pattern=r"^cat:"))

    application.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, text_message_handler))
    application.add_error_handler(error_handler)

    return application


def main():
    """Точка входа в приложение."""
    setup_logging(LOG_DIR, LOG_LEVEL)

    if not TELEGRAM_BOT_TOKEN:
        logger.error("TELEGRAM_BOT_TOKEN not set in .env")
        sys.exit(1)

    application = build_application(TELEGRAM_BOT_TOKEN)

    logger.info(f"Starting bot, API: {EXPENSES_API_URL}")
    application.run_polling(drop_pending_updates=True)


if __name__ == "__main__":
    main()
