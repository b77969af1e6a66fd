class InvalidInput(Exception):
    """Ввод пользователя не прошёл локальную проверку.

    Содержит текст повторного запроса, состояние диалога не меняется.
    """

    def __init__(self, prompt: str):
        super().__init__(prompt)
        self.prompt = prompt


class ExpensesApiError(Exception):
    """Базовая ошибка обращения к API расходов."""


class SessionExpired(ExpensesApiError):
    """Авторизацию не удалось получить или восстановить через refresh token."""


class InvalidCredentials(ExpensesApiError):
    """API отклонил email и пароль при входе."""


class RegistrationConflict(ExpensesApiError):
    """Пользователь с таким email уже существует (409)."""


class RegistrationInvalid(ExpensesApiError):
    """API счёл данные регистрации некорректными (404)."""


class RequestFailed(ExpensesApiError):
    """API доступен, но отклонил операцию не из-за авторизации."""

    def __init__(self, status: int | None, message: str | None = None, tokens=None):
        self.status = status
        self.message = message
        # Актуальная пара токенов, если запрос успел её обновить
        self.tokens = tokens
        super().__init__(f"API request failed: {status} - {message or ''}".rstrip(" -"))


class ApiUnavailable(RequestFailed):
    """Сетевая ошибка или таймаут, ответа от API нет."""

    def __init__(self, message: str | None = None):
        super().__init__(None, message)
