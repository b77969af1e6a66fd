import logging
from http import HTTPStatus
from typing import Any

from pydantic import BaseModel, ValidationError

from src.models.category import Category
from src.models.expense import Expense, StoredExpense
from src.models.user import TokenPair, UserProfile
from src.services.errors import (
    InvalidCredentials,
    RegistrationConflict,
    RegistrationInvalid,
    RequestFailed,
    SessionExpired,
)
from src.services.token_manager import TokenManager, parse_tokens

logger = logging.getLogger(__name__)


def _parse(model: type[BaseModel], data: Any, tokens: TokenPair | None = None):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.error(f"Unexpected {model.__name__} payload: {e}")
        raise RequestFailed(
            None, f"Некорректный ответ API ({model.__name__})", tokens=tokens
        ) from e


def _parse_list(model: type[BaseModel], data: Any, tokens: TokenPair | None = None) -> list:
    if not isinstance(data, list):
        raise RequestFailed(None, f"Ожидался список {model.__name__}", tokens=tokens)
    return [_parse(model, item, tokens) for item in data]


class ExpensesApi:
    """Методы REST API расходов.

    Авторизованные методы принимают текущую пару токенов и возвращают
    кортеж (результат, актуальная пара токенов).
    """

    def __init__(self, transport, token_manager: TokenManager | None = None):
        self.transport = transport
        self.token_manager = token_manager or TokenManager(transport)

    async def login(self, email: str, password: str) -> TokenPair:
        response = await self.transport.request(
            "POST", "/auth/login", payload={"email": email, "password": password}
        )
        if not response.ok:
            logger.info(f"Login rejected with status {response.status}")
            raise InvalidCredentials("Ошибка входа")
        try:
            return parse_tokens(response.data)
        except SessionExpired as e:
            raise RequestFailed(response.status, "Ответ на вход без токенов") from e

    async def register(self, email: str, password: str, name: str) -> None:
        response = await self.transport.request(
            "POST",
            "/auth/register",
            payload={"email": email, "password": password, "name": name},
        )
        if response.status in (HTTPStatus.OK, HTTPStatus.CREATED):
            return
        if response.status == HTTPStatus.CONFLICT:
            raise RegistrationConflict(email)
        if response.status == HTTPStatus.NOT_FOUND:
            raise RegistrationInvalid(response.message or email)
        raise RequestFailed(response.status, response.message)

    async def get_me(self, tokens: TokenPair) -> tuple[UserProfile, TokenPair]:
        result = await self.token_manager.call_with_auth("GET", "/users/me", tokens)
        return _parse(UserProfile, result.data, result.tokens), result.tokens

    async def get_expenses(self, tokens: TokenPair) -> tuple[list[StoredExpense], TokenPair]:
        """Расходы в порядке ответа API, этот порядок задаёт номера в списке."""
        result = await self.token_manager.call_with_auth("GET", "/expenses", tokens)
        return _parse_list(StoredExpense, result.data, result.tokens), result.tokens

    async def get_categories(self, tokens: TokenPair) -> tuple[list[Category], TokenPair]:
        result = await self.token_manager.call_with_auth("GET", "/categories", tokens)
        return _parse_list(Category, result.data, result.tokens), result.tokens

    async def add_expense(self, tokens: TokenPair, expense: Expense) -> tuple[None, TokenPair]:
        result = await self.token_manager.call_with_auth(
            "POST", "/expenses", tokens, payload=expense.to_api_payload()
        )
        return None, result.tokens

    async def update_expense(
        self, tokens: TokenPair, expense_id: int, expense: Expense
    ) -> tuple[None, TokenPair]:
        result = await self.token_manager.call_with_auth(
            "PUT", f"/expenses/{expense_id}", tokens, payload=expense.to_api_payload()
        )
        return None, result.tokens

    async def delete_expense(self, tokens: TokenPair, expense_id: int) -> tuple[None, TokenPair]:
        result = await self.token_manager.call_with_auth("DELETE", f"/expenses/{expense_id}", tokens)
        return None, result.tokens

    async def close(self) -> None:
        await self.transport.close()
