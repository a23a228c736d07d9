from datetime import datetime, timedelta

from models.order_management import OrderPriority, OrderStatus, PaymentStatus
from schemas.order_management import OrderItemResponse, OrderResponse
from utils.table_grouping import compute_order_statistics, group_orders_by_table

BASE_TIME = datetime(2026, 3, 1, 12, 0, 0)


def make_order(order_id, table_number, total, status=OrderStatus.PENDING, minutes=0, items=1, **extra):
    fields = dict(
        id=order_id,
        order_number=f"ORD-{order_id}",
        table_id=None,
        table_number=table_number,
        items=[
            OrderItemResponse(id=order_id * 10 + index, menu_item_id=1, name="Pide", price=10.0, quantity=1, status=status)
            for index in range(items)
        ],
        total_amount=total,
        status=status,
        payment_status=PaymentStatus.UNPAID,
        priority=OrderPriority.NORMAL,
        estimated_time=20,
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )
    fields.update(extra)
    return OrderResponse(**fields)


def test_groups_orders_per_table():
    orders = [
        make_order(1, "5", 100.0, minutes=10, items=2),
        make_order(2, "5", 40.5, status=OrderStatus.READY, minutes=5),
        make_order(3, "7", 30.0, minutes=1),
    ]

    groups = group_orders_by_table(orders)

    assert [group.table_number for group in groups] == ["5", "7"]
    five = groups[0]
    assert five.id == "table-5-group"
    assert five.table_name == "Masa 5"
    assert five.order_number == "Masa 5"
    assert five.is_table_group is True
    assert five.total_amount == 140.5
    assert five.item_count == 3
    assert five.customer_count == 2
    assert five.status == OrderStatus.READY
    assert five.all_statuses == [OrderStatus.PENDING, OrderStatus.READY]
    assert five.created_at == BASE_TIME + timedelta(minutes=5)
    assert five.last_order_at == BASE_TIME + timedelta(minutes=10)


def test_group_total_is_sum_of_order_totals():
    orders = [make_order(i, "3", total) for i, total in enumerate([12.5, 7.25, 80.0], start=1)]
    group = group_orders_by_table(orders)[0]
    assert group.total_amount == sum(order.total_amount for order in orders)


def test_summary_counts_each_order():
    orders = [
        make_order(1, "5", 10.0, status=OrderStatus.PENDING),
        make_order(2, "5", 10.0, status=OrderStatus.PENDING),
        make_order(3, "5", 10.0, status=OrderStatus.CANCELLED),
    ]
    summary = group_orders_by_table(orders)[0].summary
    assert summary.pending_count == 2
    assert summary.cancelled_count == 1
    assert summary.ready_count == 0


def test_cancelled_never_wins_group_status():
    orders = [
        make_order(1, "5", 10.0, status=OrderStatus.CANCELLED),
        make_order(2, "5", 10.0, status=OrderStatus.PENDING),
    ]
    assert group_orders_by_table(orders)[0].status == OrderStatus.PENDING


def test_group_picks_highest_priority_max_time_and_joins_notes():
    orders = [
        make_order(1, "5", 10.0, priority=OrderPriority.LOW, estimated_time=15, customer_notes="acısız", assigned_staff="Ayşe"),
        make_order(2, "5", 10.0, priority=OrderPriority.URGENT, estimated_time=40, customer_notes="acısız"),
        make_order(3, "5", 10.0, priority=OrderPriority.HIGH, customer_notes="ekstra ekmek"),
    ]
    group = group_orders_by_table(orders)[0]
    assert group.priority == OrderPriority.URGENT
    assert group.estimated_time == 40
    assert group.customer_notes == "acısız | ekstra ekmek"
    assert group.assigned_staff == "Ayşe"


def test_falls_back_to_table_id_and_skips_unassigned_orders():
    orders = [
        make_order(1, None, 10.0, table_id=9),
        make_order(2, None, 10.0),
    ]
    groups = group_orders_by_table(orders)
    assert len(groups) == 1
    assert groups[0].table_number == "9"


def test_table_metadata_is_attached():
    groups = group_orders_by_table([make_order(1, "5", 10.0)], {"5": {"location": "garden", "capacity": 6}})
    assert groups[0].table_location == "garden"
    assert groups[0].table_capacity == 6


def test_grouping_is_deterministic():
    orders = [
        make_order(1, "5", 10.0, minutes=3),
        make_order(2, "7", 10.0, minutes=3),
        make_order(3, "9", 10.0, minutes=1),
    ]
    first = [group.to_json() for group in group_orders_by_table(orders)]
    second = [group.to_json() for group in group_orders_by_table(orders)]
    assert first == second
    # equal lastOrderAt keeps first-seen order
    assert [group["tableNumber"] for group in first] == ["5", "7", "9"]


def test_order_statistics():
    orders = [
        make_order(1, "5", 100.0, status=OrderStatus.PENDING),
        make_order(2, "5", 50.0, status=OrderStatus.COMPLETED),
        make_order(3, "7", 30.0, status=OrderStatus.CANCELLED),
    ]
    stats = compute_order_statistics(orders)
    assert stats.total_orders == 3
    assert stats.active_orders == 1
    assert stats.total_revenue == 180.0
    assert stats.avg_order_value == 60.0
    assert stats.pending == 1
    assert stats.completed == 1
    assert stats.cancelled == 1


def test_order_statistics_empty():
    stats = compute_order_statistics([])
    assert stats.total_orders == 0
    assert stats.avg_order_value == 0.0
