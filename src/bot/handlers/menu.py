import logging
from telegram import Update
from telegram.ext import ContextTypes

from src.bot.events import Command, CommandEvent
from src.bot.handlers.common import get_engine, is_user_allowed
from src.bot.handlers.text import send_reply

logger = logging.getLogger(__name__)


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Обработчик команды /start."""
    user = update.effective_user
    if not is_user_allowed(user.id):
        await update.message.reply_text("Доступ запрещён.")
        logger.warning(f"Unauthorized access attempt from user {user.id}")
        return

    reply = await get_engine(context).handle(CommandEvent(user.id, Command.START))
    await send_reply(update.message, reply)
    logger.info(f"User {user.id} started the bot")


async def cancel_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Обработчик команды /cancel: прерывает текущий сценарий."""
    user = update.effective_user
    if not is_user_allowed(user.id):
        return

    reply = await get_engine(context).handle(CommandEvent(user.id, Command.CANCEL))
    await send_reply(update.message, reply)
