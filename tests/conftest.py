import itertools
import re
import sys
from datetime import date
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.bot.conversation import ConversationEngine
from src.bot.events import CategorySelected, Command, CommandEvent, TextMessage
from src.models.user import TokenPair
from src.services.expenses_api import ExpensesApi
from src.services.http_client import ApiResponse

TODAY = date(2026, 10, 18)
USER_ID = 1001
EMAIL = "anna@example.com"
PASSWORD = "secret"

_EXPENSE_PATH = re.compile(r"/expenses/(\d+)")


class FakeExpensesBackend:
    """REST API расходов в памяти, с тем же интерфейсом, что и ApiTransport."""

    def __init__(self):
        self.users: dict[str, dict] = {}
        self.categories = [
            {"id": 1, "name": "Еда", "description": "Продукты и кафе"},
            {"id": 2, "name": "Transport"},
            {"id": 3, "name": "Развлечения"},
        ]
        self.expenses: list[dict] = []
        self.access_tokens: dict[str, str] = {}
        self.refresh_tokens: dict[str, str] = {}
        self.calls: list[tuple[str, str]] = []
        self.failures: dict[tuple[str, str], int] = {}
        self.closed = False
        self._ids = itertools.count(1)
        self._tokens = itertools.count(1)

    def add_user(self, email: str = EMAIL, password: str = PASSWORD, name: str = "Анна") -> dict:
        user = {"id": next(self._ids), "email": email, "password": password, "name": name}
        self.users[email] = user
        return user

    def add_expense(self, email, amount, description, date_, category_id) -> dict:
        expense = {
            "id": next(self._ids),
            "amount": amount,
            "description": description,
            "date": date_,
            "categoryId": category_id,
        }
        self.expenses.append({"owner": email, **expense})
        return expense

    def expire_access_tokens(self):
        self.access_tokens.clear()

    def expire_all_tokens(self):
        self.access_tokens.clear()
        self.refresh_tokens.clear()

    def fail(self, method: str, path: str, status: int):
        self.failures[(method, path)] = status

    def count(self, method: str, path: str) -> int:
        return self.calls.count((method, path))

    def user_expenses(self, email: str = EMAIL) -> list[dict]:
        return [
            {k: v for k, v in e.items() if k != "owner"}
            for e in self.expenses
            if e["owner"] == email
        ]

    def _issue_tokens(self, email: str) -> dict:
        n = next(self._tokens)
        access, refresh = f"access-{n}", f"refresh-{n}"
        self.access_tokens[access] = email
        self.refresh_tokens[refresh] = email
        return {"accessToken": access, "refreshToken": refresh}

    async def request(self, method, path, payload=None, access_token=None) -> ApiResponse:
        self.calls.append((method, path))

        status = self.failures.pop((method, path), None)
        if status is not None:
            return ApiResponse(status, {"message": "forced failure"})

        if path == "/auth/login":
            user = self.users.get(payload.get("email"))
            if not user or user["password"] != payload.get("password"):
                return ApiResponse(401, {"message": "Invalid credentials"})
            return ApiResponse(200, self._issue_tokens(user["email"]))

        if path == "/auth/register":
            email = payload.get("email", "")
            if "@" not in email or not payload.get("password") or not payload.get("name"):
                return ApiResponse(404, {"message": "Invalid payload"})
            if email in self.users:
                return ApiResponse(409, {"message": "Email already registered"})
            self.add_user(email, payload["password"], payload["name"])
            return ApiResponse(201)

        if path == "/auth/refresh":
            email = self.refresh_tokens.pop(payload.get("refreshToken"), None)
            if email is None:
                return ApiResponse(401, {"message": "Refresh token expired"})
            return ApiResponse(200, self._issue_tokens(email))

        email = self.access_tokens.get(access_token)
        if email is None:
            return ApiResponse(401, {"message": "Unauthorized"})

        if path == "/users/me":
            user = self.users[email]
            return ApiResponse(200, {"id": user["id"], "name": user["name"], "email": email})

        if path == "/categories":
            return ApiResponse(200, list(self.categories))

        if path == "/expenses":
            if method == "GET":
                return ApiResponse(200, self.user_expenses(email))
            expense = self.add_expense(
                email,
                payload["amount"],
                payload["description"],
                payload["date"],
                payload["categoryId"],
            )
            return ApiResponse(201, expense)

        match = _EXPENSE_PATH.fullmatch(path)
        if match:
            expense_id = int(match.group(1))
            stored = next(
                (e for e in self.expenses if e["id"] == expense_id and e["owner"] == email),
                None,
            )
            if stored is None:
                return ApiResponse(404, {"message": "Expense not found"})
            if method == "DELETE":
                self.expenses.remove(stored)
                return ApiResponse(204)
            if method == "PUT":
                stored.update({k: v for k, v in payload.items() if k != "id"})
                return ApiResponse(200, {k: v for k, v in stored.items() if k != "owner"})

        return ApiResponse(404, {"message": f"No route {method} {path}"})

    async def close(self):
        self.closed = True


@pytest.fixture
def backend():
    fake = FakeExpensesBackend()
    fake.add_user()
    return fake


@pytest.fixture
def api(backend):
    return ExpensesApi(backend)


@pytest.fixture
def engine(api):
    return ConversationEngine(api, today=lambda: TODAY)


@pytest.fixture
def tokens():
    return TokenPair(access_token="access-old", refresh_token="refresh-old")


class ChatDriver:
    """Шлёт события в движок от имени пользователя, как это делают хендлеры."""

    today = TODAY
    email = EMAIL
    password = PASSWORD

    def __init__(self, engine: ConversationEngine, user_id: int = USER_ID):
        self.engine = engine
        self.user_id = user_id

    @property
    def session(self):
        return self.engine.store.get_or_create(self.user_id)

    def as_user(self, user_id: int) -> "ChatDriver":
        return ChatDriver(self.engine, user_id)

    async def command(self, name: Command):
        return await self.engine.handle(CommandEvent(self.user_id, name))

    async def say(self, text: str):
        return await self.engine.handle(TextMessage(self.user_id, text))

    async def pick(self, category_id: int):
        return await self.engine.handle(CategorySelected(self.user_id, category_id))

    async def login(self, email: str = EMAIL, password: str = PASSWORD):
        await self.command(Command.LOGIN)
        return await self.say(f"{email} {password}")

    async def add(self, amount: str, description: str, category_id: int):
        await self.command(Command.ADD)
        await self.say(amount)
        await self.say(description)
        return await self.pick(category_id)


@pytest.fixture
def chat(engine):
    return ChatDriver(engine)
