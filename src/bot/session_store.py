import asyncio
import logging
from dataclasses import dataclass, field

from src.bot.states import Idle, State
from src.models.user import TokenPair

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Состояние одного пользователя. Живёт в памяти до перезапуска бота."""

    user_id: int
    tokens: TokenPair | None = None
    state: State = field(default_factory=Idle)

    @property
    def is_authenticated(self) -> bool:
        return self.tokens is not None

    @property
    def in_flow(self) -> bool:
        return not isinstance(self.state, Idle)

    def reset(self) -> None:
        """Завершает текущий сценарий, черновик и кэш категорий теряются."""
        self.state = Idle()

    def expire(self) -> None:
        """Сбрасывает токены и сценарий после невосстановимой ошибки авторизации."""
        self.tokens = None
        self.state = Idle()


class SessionStore:
    """Сессии по user id с отдельным замком на каждого пользователя.

    Событие пользователя обрабатывается целиком под его замком, поэтому
    два сообщения одного пользователя не меняют сессию одновременно.
    Сессии разных пользователей друг от друга не зависят.
    """

    def __init__(self):
        self._sessions: dict[int, Session] = {}
        self._locks: dict[int, asyncio.Lock] = {}

    def lock(self, user_id: int) -> asyncio.Lock:
        if user_id not in self._locks:
            self._locks[user_id] = asyncio.Lock()
        return self._locks[user_id]

    def get(self, user_id: int) -> Session | None:
        return self._sessions.get(user_id)

    def get_or_create(self, user_id: int) -> Session:
        session = self._sessions.get(user_id)
        if session is None:
            session = Session(user_id=user_id)
            self._sessions[user_id] = session
            logger.debug(f"Created session for user {user_id}")
        return session

    def put(self, user_id: int, session: Session) -> None:
        if session.user_id != user_id:
            raise ValueError(f"Session of user {session.user_id} stored under {user_id}")
        self._sessions[user_id] = session

    def delete(self, user_id: int) -> None:
        self._sessions.pop(user_id, None)
        lock = self._locks.get(user_id)
        if lock is not None and not lock.locked():
            del self._locks[user_id]

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, user_id: int) -> bool:
        return user_id in self._sessions
