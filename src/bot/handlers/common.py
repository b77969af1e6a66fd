from telegram.ext import ContextTypes

from src.config import ALLOWED_USER_IDS

ENGINE_KEY = "engine"


def is_user_allowed(user_id: int) -> bool:
    """Проверяет, разрешён ли доступ пользователю."""
    if not ALLOWED_USER_IDS:
        return True
    return user_id in ALLOWED_USER_IDS


def get_engine(context: ContextTypes.DEFAULT_TYPE):
    return context.application.bot_data[ENGINE_KEY]
