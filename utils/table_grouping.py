"""
Read-side folding of orders into per-table groups for the staff order board.

Nothing here touches the database: callers pass already-fetched orders (and
optionally table metadata keyed by canonical table number), so the same input
always produces the same groups.
"""
from collections import OrderedDict
from typing import Dict, List, Optional

from models.order_management import OrderStatus
from schemas.order_management import OrderResponse, OrderStatistics, TableGroup, TableGroupSummary
from utils.order_status import TERMINAL_STATUSES, highest_priority, most_advanced_status


def _group_key(order: OrderResponse) -> Optional[str]:
    if order.table_number:
        return order.table_number
    if order.table_id is not None:
        return str(order.table_id)
    return None


def _build_group(table_number: str, orders: List[OrderResponse], info: Optional[dict]) -> TableGroup:
    statuses = [order.status for order in orders]

    all_statuses = []
    for status in statuses:
        if status not in all_statuses:
            all_statuses.append(status)

    notes = []
    for order in orders:
        if order.customer_notes and order.customer_notes not in notes:
            notes.append(order.customer_notes)

    table_name = f"Masa {table_number}"
    return TableGroup(
        id=f"table-{table_number}-group",
        table_number=table_number,
        table_name=table_name,
        order_number=table_name,
        table_location=info.get("location") if info else None,
        table_capacity=info.get("capacity") if info else None,
        orders=orders,
        total_amount=round(sum(order.total_amount for order in orders), 2),
        item_count=sum(len(order.items) for order in orders),
        customer_count=len(orders),
        status=most_advanced_status(statuses),
        all_statuses=all_statuses,
        created_at=min(order.created_at for order in orders),
        last_order_at=max(order.created_at for order in orders),
        estimated_time=max(order.estimated_time for order in orders),
        priority=highest_priority(order.priority for order in orders),
        assigned_staff=orders[0].assigned_staff,
        customer_notes=" | ".join(notes),
        summary=TableGroupSummary(
            pending_count=statuses.count(OrderStatus.PENDING),
            preparing_count=statuses.count(OrderStatus.PREPARING),
            ready_count=statuses.count(OrderStatus.READY),
            completed_count=statuses.count(OrderStatus.COMPLETED),
            cancelled_count=statuses.count(OrderStatus.CANCELLED),
        ),
    )


def group_orders_by_table(
    orders: List[OrderResponse],
    table_info: Optional[Dict[str, dict]] = None,
) -> List[TableGroup]:
    """Fold orders into one group per table, most recently active table first."""
    buckets: "OrderedDict[str, List[OrderResponse]]" = OrderedDict()
    for order in orders:
        key = _group_key(order)
        if key is None:
            continue
        buckets.setdefault(key, []).append(order)

    groups = [
        _build_group(key, bucket, (table_info or {}).get(key))
        for key, bucket in buckets.items()
    ]
    # sorted() is stable, so tables with the same last order keep first-seen order
    return sorted(groups, key=lambda group: group.last_order_at, reverse=True)


def compute_order_statistics(orders: List[OrderResponse]) -> OrderStatistics:
    total_revenue = round(sum(order.total_amount for order in orders), 2)
    statuses = [order.status for order in orders]
    return OrderStatistics(
        total_orders=len(orders),
        active_orders=sum(1 for status in statuses if status not in TERMINAL_STATUSES),
        total_revenue=total_revenue,
        avg_order_value=round(total_revenue / len(orders), 2) if orders else 0.0,
        pending=statuses.count(OrderStatus.PENDING),
        confirmed=statuses.count(OrderStatus.CONFIRMED),
        preparing=statuses.count(OrderStatus.PREPARING),
        ready=statuses.count(OrderStatus.READY),
        delivered=statuses.count(OrderStatus.DELIVERED),
        completed=statuses.count(OrderStatus.COMPLETED),
        cancelled=statuses.count(OrderStatus.CANCELLED),
    )
