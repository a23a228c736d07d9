import pytest
from pydantic import BaseModel, ValidationError

from utils.order_rules import calculate_total, estimate_preparation_time, parse_menu_item_id, validate_order
from utils.table_numbers import TableNumber, normalize_table_number


class Item:
    def __init__(self, menu_item_id=1, name="Lahmacun", price=10.0, quantity=1):
        self.menu_item_id = menu_item_id
        self.name = name
        self.price = price
        self.quantity = quantity


@pytest.mark.parametrize(
    "value,expected",
    [
        ("5", "5"),
        (5, "5"),
        ("05", "5"),
        (" 5 ", "5"),
        (5.0, "5"),
        ("a1", "A1"),
        (" bahçe-2 ", "BAHÇE-2"),
    ],
)
def test_normalize_table_number(value, expected):
    assert normalize_table_number(value) == expected


@pytest.mark.parametrize("value", [None, "", "   ", True, 5.5, "X" * 21])
def test_normalize_table_number_rejects(value):
    with pytest.raises(ValueError):
        normalize_table_number(value)


def test_table_number_type_in_models():
    class Payload(BaseModel):
        number: TableNumber

    assert Payload(number="007").number == "7"
    with pytest.raises(ValidationError):
        Payload(number="")


def test_parse_menu_item_id():
    assert parse_menu_item_id(3) == 3
    assert parse_menu_item_id("12") == 12
    assert parse_menu_item_id("abc") is None
    assert parse_menu_item_id(0) is None
    assert parse_menu_item_id(None) is None


def test_validate_order_reports_every_problem():
    errors = validate_order(None, None, [Item(menu_item_id=None, name="x", price=0, quantity=100)], total_amount=0)
    assert errors == [
        "Masa numarası veya masa ID gerekli",
        "1. ürün ID'si eksik",
        "1. ürün adı geçersiz",
        "1. ürün fiyatı geçersiz",
        "1. ürün miktarı geçersiz",
        "Toplam tutar geçersiz",
    ]


def test_validate_order_requires_items():
    assert validate_order("5", None, []) == ["En az bir ürün seçilmelidir"]


def test_validate_order_accepts_valid_order():
    assert validate_order("5", None, [Item(), Item(menu_item_id="2", quantity=99)], total_amount=100000) == []


def test_calculate_total():
    assert calculate_total([Item(price=50, quantity=2), Item(price=12.35, quantity=3)]) == 137.05


def test_estimate_preparation_time():
    items = [Item(menu_item_id=1, quantity=2), Item(menu_item_id=2, quantity=1)]
    # (10 * 2 + 0) / 2 items, rounded up
    assert estimate_preparation_time(items, {1: 10, 2: None}) == 10
    assert estimate_preparation_time(items, {1: 7, 2: 4}) == 9
    assert estimate_preparation_time(items, {}, fallback=35) == 35
    assert estimate_preparation_time(items, {}) == 20
