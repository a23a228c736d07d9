import math
from typing import Any, Dict, List, Optional, Sequence

from utils.config import DEFAULT_ESTIMATED_TIME, MAX_ITEM_QUANTITY, MAX_ORDER_AMOUNT


def parse_menu_item_id(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    text = str(value).strip()
    if text.isdecimal() and int(text) > 0:
        return int(text)
    return None


def validate_order(
    table_number: Optional[str],
    table_id: Optional[int],
    items: Optional[Sequence[Any]],
    total_amount: Optional[float] = None,
) -> List[str]:
    """
    Check an order (new or merged with a patch) and return every problem found.

    `items` may be request payload items or stored OrderItem rows; both expose
    menu_item_id, name, price and quantity.
    """
    errors = []

    if not table_number and table_id is None:
        errors.append("Masa numarası veya masa ID gerekli")

    if not items:
        errors.append("En az bir ürün seçilmelidir")

    for index, item in enumerate(items or [], start=1):
        if item.menu_item_id is None or item.menu_item_id == "":
            errors.append(f"{index}. ürün ID'si eksik")
        elif parse_menu_item_id(item.menu_item_id) is None:
            errors.append(f"{index}. ürün ID'si geçersiz")

        if not item.name or len(item.name.strip()) < 2:
            errors.append(f"{index}. ürün adı geçersiz")

        if item.price is None or item.price <= 0:
            errors.append(f"{index}. ürün fiyatı geçersiz")

        if item.quantity is None or item.quantity < 1 or item.quantity > MAX_ITEM_QUANTITY:
            errors.append(f"{index}. ürün miktarı geçersiz")

    if total_amount is not None and (total_amount <= 0 or total_amount > MAX_ORDER_AMOUNT):
        errors.append("Toplam tutar geçersiz")

    return errors


def calculate_total(items: Sequence[Any]) -> float:
    return round(sum(item.price * item.quantity for item in items), 2)


def estimate_preparation_time(
    items: Sequence[Any],
    cooking_times: Dict[int, Optional[int]],
    fallback: Optional[int] = None,
) -> int:
    """
    Average of cooking_time x quantity over the order's items, rounded up.

    Items whose menu entry has no cooking time add nothing but still count in
    the average. Without any cooking data the fallback (or the default) wins.
    """
    total_minutes = 0
    for item in items:
        cooking_time = cooking_times.get(parse_menu_item_id(item.menu_item_id))
        if cooking_time:
            total_minutes += cooking_time * item.quantity

    if total_minutes > 0 and items:
        return math.ceil(total_minutes / len(items))
    return fallback or DEFAULT_ESTIMATED_TIME
