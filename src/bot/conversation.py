import logging
from datetime import date
from typing import Callable

from src.bot.events import (
    AUTH_REQUIRED_COMMANDS,
    CategorySelected,
    Command,
    CommandEvent,
    Event,
    Menu,
    Reply,
    TextMessage,
)
from src.bot.session_store import Session, SessionStore
from src.bot.states import (
    AwaitingAddAmount,
    AwaitingAddCategory,
    AwaitingAddDescription,
    AwaitingDeleteSelector,
    AwaitingLoginCreds,
    AwaitingRegisterCreds,
    AwaitingUpdateCategory,
    AwaitingUpdateField,
    AwaitingUpdateSelector,
    AwaitingUpdateValue,
    CATEGORY_SELECTION_STATES,
)
from src.bot.validators import (
    FIELD_PROMPT,
    LOGIN_PROMPT,
    REGISTER_PROMPT,
    parse_amount,
    parse_display_index,
    parse_field,
    parse_login_credentials,
    parse_registration,
    pick_by_display_index,
    require_text,
)
from src.models.category import get_category_by_id
from src.models.expense import Expense, ExpenseField
from src.services.errors import (
    ApiUnavailable,
    InvalidCredentials,
    InvalidInput,
    RegistrationConflict,
    RegistrationInvalid,
    RequestFailed,
    SessionExpired,
)
from src.utils.formatters import format_expense, format_expense_list, format_profile

logger = logging.getLogger(__name__)

LOGIN_FIRST_TEXT = "⚠️ Сначала войдите"
SESSION_EXPIRED_TEXT = "⚠️ Сессия истекла. Войдите снова."
STATE_RESET_TEXT = "❌ Состояние сброшено"
CHOOSE_CATEGORY_TEXT = "Выберите категорию:"


class FlowFailed(Exception):
    """API отклонил операцию сценария, сценарий прерывается с этим текстом."""

    def __init__(self, text: str):
        super().__init__(text)
        self.text = text


class ConversationEngine:
    """Пошаговые сценарии бота поверх API расходов.

    Принимает события пользователя, переводит его сессию между состояниями
    и возвращает ``Reply``. Событие обрабатывается под замком пользователя:
    либо шаг завершается целиком, либо сценарий сбрасывается в Idle.
    """

    def __init__(
        self,
        api,
        store: SessionStore | None = None,
        today: Callable[[], date] = date.today,
    ):
        self.api = api
        self.store = store or SessionStore()
        self._today = today

    async def handle(self, event: Event) -> Reply:
        async with self.store.lock(event.user_id):
            session = self.store.get_or_create(event.user_id)
            try:
                return await self._dispatch(session, event)
            except InvalidInput as e:
                logger.debug(f"User {session.user_id} invalid input in {session.state.kind.name}")
                return Reply(e.prompt)
            except SessionExpired as e:
                logger.warning(f"Session expired for user {session.user_id}: {e}")
                session.expire()
                return Reply(SESSION_EXPIRED_TEXT, Menu.AUTH)
            except FlowFailed as e:
                session.reset()
                return Reply(e.text, self._menu(session))
            except Exception:
                session.reset()
                raise

    async def _dispatch(self, session: Session, event: Event) -> Reply:
        if isinstance(event, CommandEvent):
            return await self._on_command(session, event.command)
        if isinstance(event, TextMessage):
            return await self._on_text(session, event.text)
        if isinstance(event, CategorySelected):
            return await self._on_category(session, event.category_id)
        raise TypeError(f"Unsupported event: {event!r}")

    @staticmethod
    def _menu(session: Session) -> Menu:
        return Menu.MAIN if session.is_authenticated else Menu.AUTH

    async def _authorized(self, session: Session, failure_text: str, call, *args):
        """Вызывает метод API с токенами сессии и сохраняет обновлённую пару."""
        if session.tokens is None:
            raise SessionExpired("No tokens in session")
        try:
            result, tokens = await call(session.tokens, *args)
        except RequestFailed as e:
            logger.error(f"[API ERROR] {call.__name__} for user {session.user_id}: {e}")
            if e.tokens is not None:
                session.tokens = e.tokens
            raise FlowFailed(failure_text) from e
        session.tokens = tokens
        return result

    # --------------------------
    # Команды
    # --------------------------

    async def _on_command(self, session: Session, command: Command) -> Reply:
        if command is Command.START:
            if session.is_authenticated:
                return Reply("Вы снова в боте!", Menu.MAIN)
            return Reply("👋 Привет! Я бот для учёта расходов", Menu.AUTH)

        if session.in_flow:
            logger.info(f"User {session.user_id} left {session.state.kind.name} via {command.value}")
            session.reset()

        if command is Command.CANCEL:
            return Reply("Действие отменено.", self._menu(session))

        if command is Command.LOGIN:
            session.state = AwaitingLoginCreds()
            return Reply(LOGIN_PROMPT)

        if command is Command.REGISTER:
            session.state = AwaitingRegisterCreds()
            return Reply(REGISTER_PROMPT)

        if command in AUTH_REQUIRED_COMMANDS and not session.is_authenticated:
            return Reply(LOGIN_FIRST_TEXT, Menu.AUTH)

        if command is Command.LIST:
            return await self._list_expenses(session)

        if command is Command.PROFILE:
            profile = await self._authorized(
                session, "⚠️ Ошибка загрузки профиля.", self.api.get_me
            )
            return Reply(format_profile(profile), Menu.MAIN)

        if command is Command.ADD:
            session.state = AwaitingAddAmount()
            return Reply("Введите сумму расхода:")

        if command is Command.UPDATE:
            session.state = AwaitingUpdateSelector()
            return Reply("Введите номер расхода для обновления:")

        if command is Command.DELETE:
            session.state = AwaitingDeleteSelector()
            return Reply("Введите номер расхода для удаления:")

        raise ValueError(f"Unknown command: {command}")

    async def _list_expenses(self, session: Session) -> Reply:
        failure = "⚠️ Ошибка получения расходов."
        expenses = await self._authorized(session, failure, self.api.get_expenses)
        if not expenses:
            return Reply("Расходов пока нет.", Menu.MAIN)

        categories = await self._authorized(session, failure, self.api.get_categories)
        return Reply(format_expense_list(expenses, categories), Menu.MAIN)

    # --------------------------
    # Текстовые сообщения
    # --------------------------

    async def _on_text(self, session: Session, text: str) -> Reply:
        state = session.state

        if isinstance(state, AwaitingLoginCreds):
            return await self._login(session, text)
        if isinstance(state, AwaitingRegisterCreds):
            return await self._register(session, text)

        if isinstance(state, AwaitingAddAmount):
            session.state = AwaitingAddDescription(amount=parse_amount(text))
            return Reply("Введите описание расхода:")
        if isinstance(state, AwaitingAddDescription):
            return await self._add_description(session, state, text)

        if isinstance(state, AwaitingUpdateSelector):
            return await self._select_for_update(session, text)
        if isinstance(state, AwaitingUpdateField):
            return await self._choose_field(session, state, text)
        if isinstance(state, AwaitingUpdateValue):
            return await self._apply_update_value(session, state, text)

        if isinstance(state, AwaitingDeleteSelector):
            return await self._delete(session, text)

        if isinstance(state, CATEGORY_SELECTION_STATES):
            return Reply("Выберите категорию кнопкой ниже:", Menu.CATEGORIES, state.categories)

        return Reply("Выберите действие в меню.", self._menu(session))

    async def _login(self, session: Session, text: str) -> Reply:
        email, password = parse_login_credentials(text)
        session.reset()
        try:
            session.tokens = await self.api.login(email, password)
        except InvalidCredentials:
            return Reply("❌ Ошибка входа: неверный email или пароль", Menu.AUTH)
        except RequestFailed as e:
            logger.error(f"[API ERROR] login for user {session.user_id}: {e}")
            return Reply("⚠️ Сервис недоступен. Попробуйте позже.", self._menu(session))

        logger.info(f"User {session.user_id} logged in")
        return Reply("✅ Вы вошли", Menu.MAIN)

    async def _register(self, session: Session, text: str) -> Reply:
        email, password, name = parse_registration(text)
        session.reset()
        try:
            await self.api.register(email, password, name)
        except RegistrationConflict:
            return Reply("❌ Пользователь с таким email уже существует", self._menu(session))
        except RegistrationInvalid:
            return Reply("❌ Некорректные данные (email или пароль)", self._menu(session))
        except ApiUnavailable as e:
            logger.error(f"[API ERROR] register for user {session.user_id}: {e}")
            return Reply("⚠️ Не удалось зарегистрироваться. Попробуйте позже.", self._menu(session))
        except RequestFailed as e:
            logger.error(f"[API ERROR] register for user {session.user_id}: {e}")
            return Reply(f"❌ Ошибка регистрации: {e.message or e.status}", self._menu(session))

        logger.info(f"User {session.user_id} registered")
        return Reply("✅ Регистрация успешна. Теперь войдите.", Menu.AUTH)

    async def _add_description(
        self, session: Session, state: AwaitingAddDescription, text: str
    ) -> Reply:
        description = require_text(text, "Введите описание расхода:")
        categories = await self._authorized(
            session, "⚠️ Не удалось загрузить категории.", self.api.get_categories
        )
        if not categories:
            raise FlowFailed("Нет ни одной категории, добавить расход нельзя.")

        session.state = AwaitingAddCategory(
            amount=state.amount,
            description=description,
            date=self._today().isoformat(),
            categories=tuple(categories),
        )
        return Reply(CHOOSE_CATEGORY_TEXT, Menu.CATEGORIES, tuple(categories))

    async def _fetch_by_index(self, session: Session, text: str) -> Expense:
        index = parse_display_index(text)
        expenses = await self._authorized(
            session, "⚠️ Ошибка получения расходов.", self.api.get_expenses
        )
        expense = pick_by_display_index(expenses, index)
        if expense.id is None:
            raise FlowFailed("❌ У расхода нет идентификатора, операция невозможна.")
        return expense

    async def _select_for_update(self, session: Session, text: str) -> Reply:
        expense = await self._fetch_by_index(session, text)
        session.state = AwaitingUpdateField(expense=expense.model_copy())
        return Reply(f"{format_expense(expense)}\n\n{FIELD_PROMPT}")

    async def _choose_field(
        self, session: Session, state: AwaitingUpdateField, text: str
    ) -> Reply:
        field = parse_field(text)
        if field is ExpenseField.CATEGORY:
            categories = await self._authorized(
                session, "⚠️ Не удалось загрузить категории.", self.api.get_categories
            )
            if not categories:
                raise FlowFailed("Нет ни одной категории для выбора.")
            session.state = AwaitingUpdateCategory(
                expense=state.expense, categories=tuple(categories)
            )
            return Reply("Выберите новую категорию:", Menu.CATEGORIES, tuple(categories))

        session.state = AwaitingUpdateValue(expense=state.expense, field=field)
        return Reply(f"Введите новое значение для {field.value}:")

    async def _apply_update_value(
        self, session: Session, state: AwaitingUpdateValue, text: str
    ) -> Reply:
        if state.field is ExpenseField.AMOUNT:
            value = parse_amount(text)
        else:
            value = require_text(text, f"Введите новое значение для {state.field.value}:")

        updated = state.expense.model_copy(update={state.field.attribute: value})
        await self._authorized(
            session, "❌ Ошибка обновления расхода.", self.api.update_expense, updated.id, updated
        )
        session.reset()
        logger.info(f"User {session.user_id} updated expense {updated.id} ({state.field.value})")
        return Reply("✅ Расход обновлён", Menu.MAIN)

    async def _delete(self, session: Session, text: str) -> Reply:
        expense = await self._fetch_by_index(session, text)
        await self._authorized(
            session, "❌ Ошибка удаления расхода.", self.api.delete_expense, expense.id
        )
        session.reset()
        logger.info(f"User {session.user_id} deleted expense {expense.id}")
        return Reply("✅ Расход удалён", Menu.MAIN)

    # --------------------------
    # Выбор категории
    # --------------------------

    async def _on_category(self, session: Session, category_id: int) -> Reply:
        state = session.state
        if not isinstance(state, CATEGORY_SELECTION_STATES):
            logger.info(
                f"User {session.user_id} picked category {category_id} "
                f"without pending selection ({state.kind.name})"
            )
            return Reply(STATE_RESET_TEXT, is_alert=True)

        category = get_category_by_id(state.categories, category_id)
        if category is None:
            return Reply("Выберите категорию из списка:", Menu.CATEGORIES, state.categories)

        if isinstance(state, AwaitingAddCategory):
            expense = Expense(
                amount=state.amount,
                description=state.description,
                date=state.date,
                category_id=category.id,
            )
            await self._authorized(
                session, "❌ Ошибка добавления расхода.", self.api.add_expense, expense
            )
            session.reset()
            logger.info(f"User {session.user_id} added expense in category {category.id}")
            return Reply("✅ Расход добавлен", Menu.MAIN)

        updated = state.expense.model_copy(update={"category_id": category.id})
        await self._authorized(
            session, "❌ Ошибка обновления категории.", self.api.update_expense, updated.id, updated
        )
        session.reset()
        logger.info(f"User {session.user_id} moved expense {updated.id} to category {category.id}")
        return Reply("✅ Категория обновлена", Menu.MAIN)
