import pytest

from src.bot.validators import (
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
from src.models.expense import Expense, ExpenseField
from src.services.errors import InvalidInput


class TestParseAmount:
    def test_integer(self):
        assert parse_amount("500") == 500

    def test_decimal_point(self):
        assert parse_amount("12.5") == 12.5

    def test_decimal_comma(self):
        assert parse_amount("12,5") == 12.5

    def test_spaces_between_digits(self):
        assert parse_amount("1 500") == 1500

    def test_surrounding_whitespace(self):
        assert parse_amount("  99 ") == 99

    def test_not_a_number(self):
        with pytest.raises(InvalidInput) as exc_info:
            parse_amount("abc")
        assert exc_info.value.prompt == "Введите корректное число"

    def test_empty(self):
        with pytest.raises(InvalidInput):
            parse_amount("")

    @pytest.mark.parametrize("text", ["0", "-5", "inf", "nan"])
    def test_non_positive_or_non_finite(self, text):
        with pytest.raises(InvalidInput) as exc_info:
            parse_amount(text)
        assert exc_info.value.prompt == "Сумма должна быть положительным числом"


class TestParseDisplayIndex:
    def test_valid(self):
        assert parse_display_index("3") == 3

    def test_strips(self):
        assert parse_display_index(" 12 ") == 12

    @pytest.mark.parametrize("text", ["0", "-1", "1.5", "два", "", "+2"])
    def test_invalid(self, text):
        with pytest.raises(InvalidInput) as exc_info:
            parse_display_index(text)
        assert exc_info.value.prompt == "Введите корректный номер"


class TestCredentials:
    def test_login(self):
        assert parse_login_credentials("a@b.c  pw") == ("a@b.c", "pw")

    def test_login_missing_password(self):
        with pytest.raises(InvalidInput) as exc_info:
            parse_login_credentials("a@b.c")
        assert exc_info.value.prompt == LOGIN_PROMPT

    def test_registration_name_with_spaces(self):
        assert parse_registration("a@b.c pw Анна Мария") == ("a@b.c", "pw", "Анна Мария")

    def test_registration_missing_name(self):
        with pytest.raises(InvalidInput) as exc_info:
            parse_registration("a@b.c pw")
        assert exc_info.value.prompt == REGISTER_PROMPT


class TestParseField:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("amount", ExpenseField.AMOUNT),
            ("Description", ExpenseField.DESCRIPTION),
            (" date ", ExpenseField.DATE),
            ("category", ExpenseField.CATEGORY),
            ("сумма", ExpenseField.AMOUNT),
            ("Категория", ExpenseField.CATEGORY),
        ],
    )
    def test_known_fields(self, text, expected):
        assert parse_field(text) == expected

    def test_unknown_field(self):
        with pytest.raises(InvalidInput):
            parse_field("price")


class TestRequireText:
    def test_strips(self):
        assert require_text("  обед ", "prompt") == "обед"

    def test_blank(self):
        with pytest.raises(InvalidInput) as exc_info:
            require_text("   ", "Введите описание:")
        assert exc_info.value.prompt == "Введите описание:"


class TestPickByDisplayIndex:
    @pytest.fixture
    def expenses(self):
        return [
            Expense(id=10, amount=1, description="a", date="2026-10-01"),
            Expense(id=20, amount=2, description="b", date="2026-10-02"),
        ]

    def test_first_and_last(self, expenses):
        assert pick_by_display_index(expenses, 1).id == 10
        assert pick_by_display_index(expenses, 2).id == 20

    def test_out_of_range(self, expenses):
        with pytest.raises(InvalidInput) as exc_info:
            pick_by_display_index(expenses, 3)
        assert exc_info.value.prompt == "Расход с таким номером не найден"

    def test_empty_list(self):
        with pytest.raises(InvalidInput):
            pick_by_display_index([], 1)
