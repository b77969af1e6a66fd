import logging
import math
import re

from src.models.expense import Expense, ExpenseField
from src.services.errors import InvalidInput

logger = logging.getLogger(__name__)

LOGIN_PROMPT = "Введите email и пароль через пробел:"
REGISTER_PROMPT = "Введите: email пароль имя"
FIELD_PROMPT = "Введите поле для обновления (amount, description, date, category):"

FIELD_ALIASES = {
    "amount": ExpenseField.AMOUNT,
    "сумма": ExpenseField.AMOUNT,
    "description": ExpenseField.DESCRIPTION,
    "описание": ExpenseField.DESCRIPTION,
    "date": ExpenseField.DATE,
    "дата": ExpenseField.DATE,
    "category": ExpenseField.CATEGORY,
    "категория": ExpenseField.CATEGORY,
}

_INDEX_RE = re.compile(r"[0-9]+")


def parse_amount(text: str) -> float:
    """Сумма расхода, разделитель дробной части — точка или запятая."""
    normalized = text.strip().replace("\u00a0", "").replace(" ", "").replace(",", ".")
    try:
        amount = float(normalized)
    except ValueError:
        raise InvalidInput("Введите корректное число")

    if not math.isfinite(amount) or amount <= 0:
        raise InvalidInput("Сумма должна быть положительным числом")
    return amount


def parse_display_index(text: str) -> int:
    """Порядковый номер расхода в списке, начиная с 1."""
    text = text.strip()
    if not _INDEX_RE.fullmatch(text) or int(text) == 0:
        raise InvalidInput("Введите корректный номер")
    return int(text)


def parse_login_credentials(text: str) -> tuple[str, str]:
    parts = text.split()
    if len(parts) < 2:
        raise InvalidInput(LOGIN_PROMPT)
    return parts[0], parts[1]


def parse_registration(text: str) -> tuple[str, str, str]:
    parts = text.split()
    if len(parts) < 3:
        raise InvalidInput(REGISTER_PROMPT)
    email, password, *name = parts
    return email, password, " ".join(name)


def parse_field(text: str) -> ExpenseField:
    field = FIELD_ALIASES.get(text.strip().lower())
    if field is None:
        raise InvalidInput("Некорректное поле. Введите: amount, description, date, category")
    return field


def require_text(text: str, prompt: str) -> str:
    text = text.strip()
    if not text:
        raise InvalidInput(prompt)
    return text


def pick_by_display_index(expenses: list[Expense], index: int) -> Expense:
    """Находит расход по номеру из только что полученного списка."""
    if index < 1 or index > len(expenses):
        logger.debug(f"Display index {index} out of range 1..{len(expenses)}")
        raise InvalidInput("Расход с таким номером не найден")
    return expenses[index - 1]
