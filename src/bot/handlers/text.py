import logging

from telegram import Update
from telegram.error import BadRequest, TimedOut
from telegram.ext import ContextTypes

from src.bot.events import Reply, TextMessage
from src.bot.handlers.common import get_engine, is_user_allowed
from src.bot.keyboards import keyboard_for

logger = logging.getLogger(__name__)


async def safe_reply(message, text: str, reply_markup=None):
    try:
        return await message.reply_text(text, reply_markup=reply_markup)
    except TimedOut:
        logger.warning("Reply timeout, retrying once...")
        try:
            return await message.reply_text(text, reply_markup=reply_markup)
        except Exception as e:
            logger.error(f"Reply retry failed: {e}")
            return None
    except BadRequest as e:
        logger.warning(f"BadRequest in reply: {e}")
        return None


async def send_reply(message, reply: Reply):
    """Отправляет ответ движка с нужной клавиатурой."""
    return await safe_reply(message, reply.text, reply_markup=keyboard_for(reply))


async def text_message_handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    user = update.effective_user
    if not is_user_allowed(user.id):
        return

    text = update.message.text.strip()
    reply = await get_engine(context).handle(TextMessage(user.id, text))
    await send_reply(update.message, reply)
