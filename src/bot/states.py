from dataclasses import dataclass
from enum import IntEnum, auto
from typing import ClassVar, Union

from src.models.category import Category
from src.models.expense import Expense, ExpenseField


class ConversationState(IntEnum):
    """Состояния диалога с пользователем."""

    IDLE = auto()
    AWAITING_LOGIN_CREDS = auto()
    AWAITING_REGISTER_CREDS = auto()
    AWAITING_ADD_AMOUNT = auto()
    AWAITING_ADD_DESCRIPTION = auto()
    AWAITING_ADD_CATEGORY = auto()
    AWAITING_UPDATE_SELECTOR = auto()
    AWAITING_UPDATE_FIELD = auto()
    AWAITING_UPDATE_VALUE = auto()
    AWAITING_UPDATE_CATEGORY = auto()
    AWAITING_DELETE_SELECTOR = auto()


# Каждое состояние хранит ровно те данные, которые нужны его шагу.
# Черновик расхода и кэш категорий живут только внутри состояния сценария,
# поэтому переход в Idle сбрасывает их автоматически.


@dataclass(frozen=True)
class Idle:
    kind: ClassVar[ConversationState] = ConversationState.IDLE


@dataclass(frozen=True)
class AwaitingLoginCreds:
    kind: ClassVar[ConversationState] = ConversationState.AWAITING_LOGIN_CREDS


@dataclass(frozen=True)
class AwaitingRegisterCreds:
    kind: ClassVar[ConversationState] = ConversationState.AWAITING_REGISTER_CREDS


@dataclass(frozen=True)
class AwaitingAddAmount:
    kind: ClassVar[ConversationState] = ConversationState.AWAITING_ADD_AMOUNT


@dataclass(frozen=True)
class AwaitingAddDescription:
    amount: float
    kind: ClassVar[ConversationState] = ConversationState.AWAITING_ADD_DESCRIPTION


@dataclass(frozen=True)
class AwaitingAddCategory:
    amount: float
    description: str
    date: str
    categories: tuple[Category, ...]
    kind: ClassVar[ConversationState] = ConversationState.AWAITING_ADD_CATEGORY


@dataclass(frozen=True)
class AwaitingUpdateSelector:
    kind: ClassVar[ConversationState] = ConversationState.AWAITING_UPDATE_SELECTOR


@dataclass(frozen=True)
class AwaitingUpdateField:
    expense: Expense
    kind: ClassVar[ConversationState] = ConversationState.AWAITING_UPDATE_FIELD


@dataclass(frozen=True)
class AwaitingUpdateValue:
    expense: Expense
    field: ExpenseField
    kind: ClassVar[ConversationState] = ConversationState.AWAITING_UPDATE_VALUE


@dataclass(frozen=True)
class AwaitingUpdateCategory:
    expense: Expense
    categories: tuple[Category, ...]
    kind: ClassVar[ConversationState] = ConversationState.AWAITING_UPDATE_CATEGORY


@dataclass(frozen=True)
class AwaitingDeleteSelector:
    kind: ClassVar[ConversationState] = ConversationState.AWAITING_DELETE_SELECTOR


State = Union[
    Idle,
    AwaitingLoginCreds,
    AwaitingRegisterCreds,
    AwaitingAddAmount,
    AwaitingAddDescription,
    AwaitingAddCategory,
    AwaitingUpdateSelector,
    AwaitingUpdateField,
    AwaitingUpdateValue,
    AwaitingUpdateCategory,
    AwaitingDeleteSelector,
]

CATEGORY_SELECTION_STATES = (AwaitingAddCategory, AwaitingUpdateCategory)
