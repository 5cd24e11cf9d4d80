"""Tests for wizard input validators."""

import pytest

from app.bot.conversation.validators import (
    CREATE_CATEGORY_PREFIX,
    EDIT_CATEGORY_PREFIX,
    parse_category_token,
    parse_name,
    parse_price,
    require_text,
)
from app.errors import ValidationError
from app.models import Category


class TestParsePrice:

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("2990", 2990.0),
            (" 2990 ", 2990.0),
            ("1499.50", 1499.5),
            ("1499,50", 1499.5),
            ("12 500", 12500.0),
        ],
    )
    def test_valid(self, raw, expected):
        assert parse_price(raw) == expected

    @pytest.mark.parametrize("raw", ["abc", "", None, "0", "-1", "nan", "inf", "1e999", "1e15", "10000000000"])
    def test_invalid(self, raw):
        with pytest.raises(ValidationError):
            parse_price(raw)


class TestRequireText:

    def test_strips(self):
        assert require_text("  Blue Jacket ", "Название") == "Blue Jacket"

    @pytest.mark.parametrize("raw", ["", "   ", None])
    def test_empty(self, raw):
        with pytest.raises(ValidationError, match="Название"):
            require_text(raw, "Название")

    def test_max_length(self):
        assert require_text("a" * 10, "Описание", max_length=10) == "a" * 10
        with pytest.raises(ValidationError, match="Описание"):
            require_text("a" * 11, "Описание", max_length=10)


class TestParseName:

    def test_fits_column(self):
        assert parse_name(" " + "x" * 255 + " ") == "x" * 255

    def test_too_long(self):
        with pytest.raises(ValidationError):
            parse_name("x" * 256)

    def test_empty(self):
        with pytest.raises(ValidationError):
            parse_name("  ")


class TestParseCategoryToken:

    def test_creation_token(self):
        assert parse_category_token("cat_Hoodies", CREATE_CATEGORY_PREFIX) is Category.HOODIES

    def test_edit_token(self):
        assert parse_category_token("editcat_T-Shirts", EDIT_CATEGORY_PREFIX) is Category.T_SHIRTS

    def test_wrong_prefix(self):
        with pytest.raises(ValidationError):
            parse_category_token("editcat_Jeans", CREATE_CATEGORY_PREFIX)

    def test_unknown_category(self):
        with pytest.raises(ValidationError):
            parse_category_token("cat_Spacesuits", CREATE_CATEGORY_PREFIX)

    def test_label_is_not_accepted(self):
        with pytest.raises(ValidationError):
            parse_category_token("cat_👕 Худи", CREATE_CATEGORY_PREFIX)
