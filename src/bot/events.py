from dataclasses import dataclass
from enum import Enum

from src.models.category import Category


class Command(str, Enum):
    """Команды меню и slash-команды. Значение совпадает с callback_data после ``menu:``."""

    START = "start"
    LOGIN = "login"
    REGISTER = "register"
    LIST = "expenses"
    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"
    PROFILE = "profile"
    CANCEL = "cancel"


AUTH_REQUIRED_COMMANDS = frozenset(
    {Command.LIST, Command.ADD, Command.UPDATE, Command.DELETE, Command.PROFILE}
)


@dataclass(frozen=True)
class CommandEvent:
    user_id: int
    command: Command


@dataclass(frozen=True)
class TextMessage:
    user_id: int
    text: str


@dataclass(frozen=True)
class CategorySelected:
    user_id: int
    category_id: int


Event = CommandEvent | TextMessage | CategorySelected


class Menu(str, Enum):
    NONE = "none"
    AUTH = "auth"
    MAIN = "main"
    CATEGORIES = "categories"


@dataclass(frozen=True)
class Reply:
    """Ответ движка, не зависящий от Telegram.

    ``is_alert`` означает всплывающее уведомление на нажатие кнопки
    вместо нового сообщения.
    """

    text: str
    menu: Menu = Menu.NONE
    categories: tuple[Category, ...] = ()
    is_alert: bool = False
