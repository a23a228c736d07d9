"""
Order lifecycle rules shared by the orders API and the table aggregator.

Order-level status changes go through ORDER_STATUS_TRANSITIONS. Item-level
statuses reuse the same vocabulary but are set directly by kitchen staff,
limited to ITEM_STATUSES.
"""
from typing import Iterable, List, Optional

from models.order_management import OrderStatus, OrderPriority
from utils.exceptions import InvalidTransitionError

ORDER_STATUS_TRANSITIONS = {
    OrderStatus.PENDING: [OrderStatus.CONFIRMED, OrderStatus.PREPARING, OrderStatus.CANCELLED],
    OrderStatus.CONFIRMED: [OrderStatus.PREPARING, OrderStatus.CANCELLED],
    OrderStatus.PREPARING: [OrderStatus.READY, OrderStatus.CANCELLED],
    OrderStatus.READY: [OrderStatus.DELIVERED, OrderStatus.PREPARING],
    OrderStatus.DELIVERED: [OrderStatus.COMPLETED, OrderStatus.READY],
    OrderStatus.COMPLETED: [],
    OrderStatus.CANCELLED: [],
}

TERMINAL_STATUSES = [OrderStatus.COMPLETED, OrderStatus.CANCELLED]

ITEM_STATUSES = [OrderStatus.PENDING, OrderStatus.PREPARING, OrderStatus.READY, OrderStatus.DELIVERED]

# Higher means further along; cancelled never wins
STATUS_PRIORITY = {
    OrderStatus.PENDING: 1,
    OrderStatus.CONFIRMED: 2,
    OrderStatus.PREPARING: 3,
    OrderStatus.READY: 4,
    OrderStatus.DELIVERED: 5,
    OrderStatus.COMPLETED: 6,
    OrderStatus.CANCELLED: 0,
}

PRIORITY_LEVELS = {
    OrderPriority.LOW: 1,
    OrderPriority.NORMAL: 2,
    OrderPriority.HIGH: 3,
    OrderPriority.URGENT: 4,
}


def get_next_statuses(current_status: OrderStatus) -> List[OrderStatus]:
    return ORDER_STATUS_TRANSITIONS.get(OrderStatus(current_status), [])


def is_terminal(status: OrderStatus) -> bool:
    return OrderStatus(status) in TERMINAL_STATUSES


def validate_status_transition(current_status: OrderStatus, new_status: OrderStatus):
    current_status = OrderStatus(current_status)
    new_status = OrderStatus(new_status)
    if new_status not in get_next_statuses(current_status):
        raise InvalidTransitionError(
            f"{current_status.value} durumundan {new_status.value} durumuna geçiş yapılamaz",
            code="INVALID_TRANSITION",
        )


def most_advanced_status(statuses: Iterable[OrderStatus], start: Optional[OrderStatus] = None) -> OrderStatus:
    """Pick the furthest-along status; ties keep the earlier one."""
    best = OrderStatus(start) if start is not None else None
    for status in statuses:
        status = OrderStatus(status)
        if best is None or STATUS_PRIORITY[status] > STATUS_PRIORITY[best]:
            best = status
    return best if best is not None else OrderStatus.PENDING


def derive_order_status(item_statuses: List[OrderStatus]) -> OrderStatus:
    """
    Order status implied by its items: the shared status when all items agree,
    otherwise the most advanced one so staff never miss progress.
    """
    distinct = {OrderStatus(status) for status in item_statuses}
    if len(distinct) == 1:
        return distinct.pop()
    return most_advanced_status(item_statuses, start=OrderStatus.PENDING)


def highest_priority(priorities: Iterable[OrderPriority]) -> OrderPriority:
    best = None
    for priority in priorities:
        priority = OrderPriority(priority) if priority else OrderPriority.NORMAL
        if best is None or PRIORITY_LEVELS[priority] > PRIORITY_LEVELS[best]:
            best = priority
    return best if best is not None else OrderPriority.NORMAL
