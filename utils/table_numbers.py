"""
Canonical table numbers.

Tables, orders and sessions all store the table number in one canonical
string form so that lookups are a single equality match:

    " 5 ", 5, "05"  ->  "5"
    "a1", "A1"      ->  "A1"
"""
from typing import Annotated, Any

from pydantic import BeforeValidator

MAX_TABLE_NUMBER_LENGTH = 20


def normalize_table_number(value: Any) -> str:
    if value is None or isinstance(value, bool):
        raise ValueError("Masa numarası gerekli")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError("Masa numarası geçersiz")
        value = int(value)

    text = str(value).strip().upper()
    if not text:
        raise ValueError("Masa numarası gerekli")
    if len(text) > MAX_TABLE_NUMBER_LENGTH:
        raise ValueError("Masa numarası çok uzun")
    if text.isdecimal():
        text = str(int(text))
    return text


TableNumber = Annotated[str, BeforeValidator(normalize_table_number)]
