from src.config import CURRENCY_SIGN
from src.models.category import category_names
from src.models.expense import Expense
from src.models.user import UserProfile

NO_CATEGORY = "—"


def format_amount(amount: float) -> str:
    """Форматирует сумму: разряды через пробел, без лишних нулей после точки."""
    formatted = f"{amount:,.2f}".rstrip("0").rstrip(".")
    return formatted.replace(",", " ")


def format_expense(expense: Expense, category_name: str | None = None) -> str:
    return (
        f"Сумма: {format_amount(expense.amount)} {CURRENCY_SIGN}\n"
        f"Описание: {expense.description}\n"
        f"Дата: {expense.date}\n"
        f"Категория: {category_name or NO_CATEGORY}"
    )


def format_expense_list(expenses: list[Expense], categories) -> str:
    """Нумерованный список расходов, номер — позиция в ответе API."""
    if not expenses:
        return "Расходов пока нет."

    names = category_names(categories)
    blocks = []
    for index, expense in enumerate(expenses, start=1):
        category_name = names.get(expense.category_id)
        blocks.append(f"{index}. {format_expense(expense, category_name)}")
    return "\n\n".join(blocks)


def format_profile(profile: UserProfile) -> str:
    return f"👤 Профиль\n\nИмя: {profile.name}\nEmail: {profile.email}"
