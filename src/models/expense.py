from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ExpenseField(str, Enum):
    """Поля расхода, которые пользователь может изменить."""

    AMOUNT = "amount"
    DESCRIPTION = "description"
    DATE = "date"
    CATEGORY = "category"

    @property
    def attribute(self) -> str:
        if self is ExpenseField.CATEGORY:
            return "category_id"
        return self.value


class Expense(BaseModel):
    """Модель расхода в формате REST API."""

    model_config = ConfigDict(populate_by_name=True)

    id: int | None = None
    amount: float = Field(gt=0)
    description: str = Field(min_length=1)
    date: str
    category_id: int | None = Field(default=None, alias="categoryId")

    def to_api_payload(self) -> dict:
        """Тело запроса для POST/PUT /expenses."""
        return self.model_dump(by_alias=True, exclude={"id"})


class StoredExpense(Expense):
    """Расход, уже сохранённый в API.

    Ограничения черновика здесь не проверяются: запись с нулевой суммой
    или пустым описанием должна показываться в списке и удаляться.
    """

    amount: float
    description: str
