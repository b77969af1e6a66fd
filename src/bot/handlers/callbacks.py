import logging
from telegram import Update
from telegram.ext import ContextTypes

from src.bot.events import CategorySelected, Command, CommandEvent
from src.bot.handlers.common import get_engine, is_user_allowed
from src.bot.handlers.text import send_reply

logger = logging.getLogger(__name__)


async def menu_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Обработчик кнопок меню (menu:<команда>)."""
    query = update.callback_query
    await query.answer()

    user = update.effective_user
    if not is_user_allowed(user.id):
        return

    action = query.data.split(":", 1)[1]
    try:
        command = Command(action)
    except ValueError:
        logger.warning(f"Unknown menu action from user {user.id}: {action}")
        return

    reply = await get_engine(context).handle(CommandEvent(user.id, command))
    await send_reply(query.message, reply)


async def category_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Обработчик выбора категории (cat:<id>)."""
    query = update.callback_query

    user = update.effective_user
    if not is_user_allowed(user.id):
        await query.answer()
        return

    try:
        category_id = int(query.data.split(":", 1)[1])
    except ValueError:
        logger.warning(f"Malformed category callback from user {user.id}: {query.data}")
        await query.answer()
        return

    reply = await get_engine(context).handle(CategorySelected(user.id, category_id))
    if reply.is_alert:
        await query.answer(reply.text, show_alert=True)
        return

    await query.answer()
    await send_reply(query.message, reply)
