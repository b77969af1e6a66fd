from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from src.bot.events import Command, Menu, Reply

STYLE_PRIMARY = "primary"
STYLE_DANGER = "danger"


def _styled(text: str, callback_data: str, style: str = None, **kwargs) -> InlineKeyboardButton:
    """Создаёт InlineKeyboardButton с опциональной стилизацией (Bot API 9.4)."""
    api_kwargs = {}
    if style:
        api_kwargs["style"] = style
    return InlineKeyboardButton(
        text, callback_data=callback_data, api_kwargs=api_kwargs or None, **kwargs
    )


def _menu_data(command: Command) -> str:
    return f"menu:{command.value}"


def auth_keyboard() -> InlineKeyboardMarkup:
    """Меню для неавторизованного пользователя."""
    buttons = [
        [_styled("🔐 Войти", _menu_data(Command.LOGIN), STYLE_PRIMARY)],
        [InlineKeyboardButton("📝 Регистрация", callback_data=_menu_data(Command.REGISTER))],
    ]
    return InlineKeyboardMarkup(buttons)


def main_menu_keyboard() -> InlineKeyboardMarkup:
    """Главное меню авторизованного пользователя."""
    buttons = [
        [InlineKeyboardButton("📋 Мои расходы", callback_data=_menu_data(Command.LIST))],
        [_styled("➕ Добавить расход", _menu_data(Command.ADD), STYLE_PRIMARY)],
        [InlineKeyboardButton("✏️ Обновить расход", callback_data=_menu_data(Command.UPDATE))],
        [_styled("🗑️ Удалить расход", _menu_data(Command.DELETE), STYLE_DANGER)],
        [InlineKeyboardButton("👤 Профиль", callback_data=_menu_data(Command.PROFILE))],
    ]
    return InlineKeyboardMarkup(buttons)


def categories_keyboard(categories) -> InlineKeyboardMarkup:
    """Клавиатура выбора категории, по кнопке в строке."""
    buttons = [
        [InlineKeyboardButton(cat.name, callback_data=f"cat:{cat.id}")]
        for cat in categories
    ]
    return InlineKeyboardMarkup(buttons)


def keyboard_for(reply: Reply) -> InlineKeyboardMarkup | None:
    if reply.menu == Menu.AUTH:
        return auth_keyboard()
    if reply.menu == Menu.MAIN:
        return main_menu_keyboard()
    if reply.menu == Menu.CATEGORIES:
        return categories_keyboard(reply.categories)
    return None
