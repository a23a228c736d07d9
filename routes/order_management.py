from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import or_
from typing import Any, Dict, List, Optional, Sequence
from datetime import datetime
import logging
import secrets
import string
import time

from utils.database import get_db
from utils.config import MAX_ORDER_AMOUNT
from models.menu_management import MenuItem
from models.order_management import Order, OrderItem, OrderPriority, OrderStatus, PaymentStatus
from models.table_management import Table, TableStatus
from schemas.order_management import (
    AddNotesAction,
    CloseTableAction,
    OrderCreate,
    OrderItemCreate,
    OrderPatch,
    OrderResponse,
    UpdateItemStatusAction,
    UpdatePaymentAction,
    UpdateStatusAction,
    parse_order_update,
)
from utils.exceptions import (
    AppError,
    ConflictError,
    NotFoundError,
    UnavailableError,
    UnexpectedError,
    ValidationError,
)
from utils.order_rules import (
    calculate_total,
    estimate_preparation_time,
    parse_menu_item_id,
    validate_order,
)
from utils.order_status import (
    ITEM_STATUSES,
    TERMINAL_STATUSES,
    derive_order_status,
    is_terminal,
    validate_status_transition,
)
from utils.table_grouping import compute_order_statistics, group_orders_by_table
from utils.validators import escape_like
from routes.table_management import active_orders_query, find_table, mark_table_occupied, sync_table_occupancy
from routes.sessions import close_table_sessions, record_session_order


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/orders", tags=["order_management"])

ORDER_NUMBER_ALPHABET = string.digits + string.ascii_lowercase


def generate_order_number() -> str:
    suffix = "".join(secrets.choice(ORDER_NUMBER_ALPHABET) for _ in range(9))
    return f"ORD-{int(time.time() * 1000)}-{suffix}"


def get_order_or_404(db: Session, order_id: int) -> Order:
    db_order = db.query(Order).filter(Order.id == order_id).first()
    if not db_order:
        raise NotFoundError("Sipariş bulunamadı")
    return db_order


def get_order_table(db: Session, db_order: Order) -> Optional[Table]:
    if db_order.table is not None:
        return db_order.table
    return find_table(db, table_number=db_order.table_number)


def check_menu_items(db: Session, items: Sequence[OrderItemCreate]) -> Dict[int, MenuItem]:
    """Every referenced menu item has to exist and be orderable right now"""
    menu_ids = sorted({parse_menu_item_id(item.menu_item_id) for item in items})
    menu_items = {
        menu_item.id: menu_item
        for menu_item in db.query(MenuItem).filter(MenuItem.id.in_(menu_ids)).all()
    }

    missing = [menu_id for menu_id in menu_ids if menu_id not in menu_items]
    if missing:
        raise NotFoundError(
            "Bazı ürünler bulunamadı",
            errors=[f"{menu_id} numaralı ürün bulunamadı" for menu_id in missing],
        )

    unavailable = [menu_items[menu_id].name for menu_id in menu_ids if not menu_items[menu_id].is_available]
    if unavailable:
        raise UnavailableError(
            "Bazı ürünler şu anda mevcut değil",
            errors=[f"{name} şu anda mevcut değil" for name in unavailable],
        )

    return menu_items


def build_order_items(items: Sequence[OrderItemCreate], now: datetime) -> List[OrderItem]:
    # Name and price are a snapshot of what the customer saw at checkout
    return [
        OrderItem(
            position=position,
            menu_item_id=parse_menu_item_id(item.menu_item_id),
            name=item.name.strip(),
            price=item.price,
            quantity=item.quantity,
            notes=item.notes,
            selected_options=item.selected_options,
            status=OrderStatus.PENDING,
            added_at=now,
        )
        for position, item in enumerate(items)
    ]


def check_total(total: float):
    if total <= 0 or total > MAX_ORDER_AMOUNT:
        raise ValidationError("Sipariş bilgileri geçersiz", errors=["Toplam tutar geçersiz"])


def load_menu_images(db: Session, orders: List[Order]) -> Dict[int, str]:
    menu_ids = {item.menu_item_id for order in orders for item in order.items if item.menu_item_id}
    if not menu_ids:
        return {}
    rows = db.query(MenuItem.id, MenuItem.image).filter(MenuItem.id.in_(menu_ids)).all()
    return {menu_id: image for menu_id, image in rows if image}


def load_table_info(db: Session, orders: List[OrderResponse]) -> Dict[str, dict]:
    numbers = {order.table_number for order in orders if order.table_number}
    if not numbers:
        return {}
    tables = db.query(Table).filter(Table.number.in_(numbers)).all()
    return {table.number: {"location": table.location, "capacity": table.capacity} for table in tables}


def to_order_response(db_order: Order, images: Optional[Dict[int, str]] = None) -> OrderResponse:
    response = OrderResponse.model_validate(db_order)
    if images:
        for item in response.items:
            item.image = images.get(item.menu_item_id)
    return response


# Update handlers, one per action. Each mutates the order in place and returns
# the success message; the caller commits.
def apply_status_update(db: Session, db_order: Order, update: UpdateStatusAction, now: datetime) -> str:
    validate_status_transition(db_order.status, update.status)

    previous = db_order.status
    db_order.status = update.status
    db_order.stamp(update.status, now)
    if update.assigned_staff:
        db_order.assigned_staff = update.assigned_staff

    logger.info(f"Order {db_order.order_number}: {previous.value} -> {update.status.value}")
    if is_terminal(update.status):
        sync_table_occupancy(db, get_order_table(db, db_order))
    return "Sipariş durumu güncellendi"


def apply_item_status_update(db: Session, db_order: Order, update: UpdateItemStatusAction, now: datetime) -> str:
    if is_terminal(db_order.status):
        raise ConflictError("Tamamlanmış veya iptal edilmiş siparişin ürünleri güncellenemez")
    if update.item_status not in ITEM_STATUSES:
        raise ValidationError("Geçersiz ürün durumu")
    if update.item_index >= len(db_order.items):
        raise NotFoundError("Ürün bulunamadı")

    item = db_order.items[update.item_index]
    item.status = update.item_status
    item.status_updated_at = now

    new_status = derive_order_status([order_item.status for order_item in db_order.items])
    db_order.status = new_status
    db_order.stamp(new_status, now)

    logger.info(
        f"Order {db_order.order_number}: item {update.item_index} -> {update.item_status.value}, "
        f"order now {new_status.value}"
    )
    return "Ürün durumu güncellendi"


def apply_payment_update(db: Session, db_order: Order, update: UpdatePaymentAction, now: datetime) -> str:
    db_order.payment_status = update.payment_status

    if update.payment_status == PaymentStatus.PAID and db_order.status == OrderStatus.DELIVERED:
        db_order.status = OrderStatus.COMPLETED
        db_order.stamp(OrderStatus.COMPLETED, now)
        logger.info(f"Order {db_order.order_number} paid after delivery, completed")
        sync_table_occupancy(db, get_order_table(db, db_order))
    return "Ödeme durumu güncellendi"


def apply_notes_update(db: Session, db_order: Order, update: AddNotesAction, now: datetime) -> str:
    if update.customer_notes:
        db_order.customer_notes = update.customer_notes
    if update.kitchen_notes:
        db_order.kitchen_notes = update.kitchen_notes
    return "Notlar güncellendi"


def apply_patch(db: Session, db_order: Order, update: OrderPatch, now: datetime) -> str:
    if is_terminal(db_order.status):
        raise ConflictError("Tamamlanmış veya iptal edilmiş sipariş güncellenemez")

    fields = update.model_dump(exclude_unset=True, exclude={"id", "items"})
    items = update.items if "items" in update.model_fields_set else None

    merged_items = items if items is not None else db_order.items
    merged_total = fields.get("total_amount", db_order.total_amount if items is None else None)
    errors = validate_order(db_order.table_number, db_order.table_id, merged_items, merged_total)
    if errors:
        raise ValidationError("Sipariş bilgileri geçersiz", errors=errors)

    if items is not None:
        check_menu_items(db, items)
        # Replacement items start pending but the order keeps its status; it only
        # moves forward through updateStatus or updateItemStatus.
        db_order.items = build_order_items(items, now)
        if fields.get("total_amount") is None:
            fields["total_amount"] = calculate_total(items)
            check_total(fields["total_amount"])

    for field, value in fields.items():
        if value is None and field in ("total_amount", "priority", "estimated_time"):
            continue
        setattr(db_order, field, value)

    logger.info(f"Order {db_order.order_number} patched: {sorted(fields)}")
    return "Sipariş başarıyla güncellendi"


ACTION_HANDLERS = {
    UpdateStatusAction: apply_status_update,
    UpdateItemStatusAction: apply_item_status_update,
    UpdatePaymentAction: apply_payment_update,
    AddNotesAction: apply_notes_update,
    OrderPatch: apply_patch,
}


def close_table(db: Session, table_number: str) -> dict:
    table = find_table(db, table_number=table_number)
    if table is not None:
        active_orders = active_orders_query(db, table).all()
    else:
        active_orders = db.query(Order).filter(
            Order.table_number == table_number,
            Order.status.notin_(TERMINAL_STATUSES),
        ).all()

    if not active_orders:
        raise NotFoundError("Bu masada aktif sipariş bulunamadı")

    now = datetime.utcnow()
    try:
        closed_sessions = close_table_sessions(db, table, closed_by="staff", now=now) if table else 0

        for db_order in active_orders:
            db_order.status = OrderStatus.COMPLETED
            db_order.stamp(OrderStatus.COMPLETED, now)
            db_order.closed_by_table = True

        if table is not None:
            table.status = TableStatus.EMPTY
            table.current_session_id = None
            table.last_closed_at = now

        db.commit()
        logger.info(f"Table {table_number} closed: {len(active_orders)} order(s) completed, {closed_sessions} session(s) closed")
        return {
            "success": True,
            "message": f"Masa {table_number} başarıyla kapatıldı",
            "completedOrders": len(active_orders),
            "closedSessions": closed_sessions,
        }
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to close table {table_number}: {str(e)}")
        raise UnexpectedError("Masa kapatılamadı")


# Order Management Endpoints
@router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(order: OrderCreate, db: Session = Depends(get_db)):
    errors = validate_order(order.table_number, order.table_id, order.items, order.total_amount)
    if errors:
        raise ValidationError("Sipariş bilgileri geçersiz", errors=errors)

    table = find_table(db, table_number=order.table_number, table_id=order.table_id)
    if not table:
        raise NotFoundError("Masa bulunamadı")

    menu_items = check_menu_items(db, order.items)

    total_amount = order.total_amount if order.total_amount is not None else calculate_total(order.items)
    check_total(total_amount)

    estimated_time = estimate_preparation_time(
        order.items,
        {menu_id: menu_item.cooking_time for menu_id, menu_item in menu_items.items()},
        fallback=order.estimated_time,
    )

    now = datetime.utcnow()
    db_order = Order(
        order_number=generate_order_number(),
        table_id=table.id,
        table_number=table.number,
        session_id=order.session_id,
        device_fingerprint=order.device_fingerprint,
        total_amount=total_amount,
        status=OrderStatus.PENDING,
        payment_status=PaymentStatus.UNPAID,
        priority=order.priority or OrderPriority.NORMAL,
        customer_notes=order.customer_notes or "",
        kitchen_notes=order.kitchen_notes or "",
        estimated_time=estimated_time,
        timestamps={OrderStatus.PENDING.value: now.isoformat()},
        created_at=now,
        updated_at=now,
    )
    db_order.items = build_order_items(order.items, now)

    try:
        db.add(db_order)
        # Flush so the session aggregates can reference the new order id
        db.flush()
        if order.session_id:
            record_session_order(db, order.session_id, db_order, order.device_fingerprint, now)
        mark_table_occupied(table, now)
        db.commit()
        db.refresh(db_order)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create order for table {table.number}: {str(e)}")
        raise UnexpectedError("Sipariş oluşturulamadı")

    logger.info(f"Order {db_order.order_number} created for table {table.number}, total {total_amount}")
    return {
        "success": True,
        "id": db_order.id,
        "orderNumber": db_order.order_number,
        "estimatedTime": db_order.estimated_time,
        "totalAmount": db_order.total_amount,
        "status": db_order.status.value,
        "message": "Sipariş başarıyla oluşturuldu",
    }


@router.get("")
async def list_orders(
    group_by_table: bool = Query(False, alias="groupByTable"),
    exclude_completed: bool = Query(False, alias="excludeCompleted"),
    include_table_info: bool = Query(False, alias="includeTableInfo"),
    include_menu_images: bool = Query(False, alias="includeMenuImages"),
    status_filter: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    query = db.query(Order)

    if exclude_completed:
        query = query.filter(Order.status.notin_(TERMINAL_STATUSES))

    if status_filter and status_filter != "all":
        try:
            query = query.filter(Order.status == OrderStatus(status_filter))
        except ValueError:
            raise ValidationError("Geçersiz sipariş durumu")

    if search and search.strip():
        term = f"%{escape_like(search.strip())}%"
        query = query.filter(
            or_(
                Order.order_number.ilike(term, escape="\\"),
                Order.table_number.ilike(term, escape="\\"),
                Order.items.any(OrderItem.name.ilike(term, escape="\\")),
            )
        )

    db_orders = query.order_by(Order.created_at.desc(), Order.id.desc()).all()
    images = load_menu_images(db, db_orders) if include_menu_images else None
    orders = [to_order_response(db_order, images) for db_order in db_orders]
    logger.debug(f"Retrieved {len(orders)} orders (grouped={group_by_table})")

    if group_by_table:
        table_info = load_table_info(db, orders) if include_table_info else None
        groups = group_orders_by_table(orders, table_info)
        return {
            "success": True,
            "orders": [group.to_json() for group in groups],
            "originalOrders": [order.to_json() for order in orders],
            "statistics": compute_order_statistics(orders).to_json(),
        }

    return {"success": True, "orders": [order.to_json() for order in orders]}


@router.get("/{order_id}")
async def get_order(order_id: int, db: Session = Depends(get_db)):
    db_order = get_order_or_404(db, order_id)
    images = load_menu_images(db, [db_order])
    return {"success": True, "order": to_order_response(db_order, images).to_json()}


@router.put("")
async def update_order(body: Dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    update = parse_order_update(body)
    logger.debug(f"Order update request: {body}")

    if isinstance(update, CloseTableAction):
        return close_table(db, update.table_number)

    db_order = get_order_or_404(db, update.id)
    handler = ACTION_HANDLERS[type(update)]
    now = datetime.utcnow()

    try:
        message = handler(db, db_order, update, now)
        db_order.updated_at = now
        db.commit()
        db.refresh(db_order)
    except AppError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update order {update.id}: {str(e)}")
        raise UnexpectedError("Sipariş güncellenemedi")

    return {"success": True, "message": message, "order": to_order_response(db_order).to_json()}


@router.delete("")
async def delete_order(id: Optional[int] = None, db: Session = Depends(get_db)):
    if id is None:
        raise ValidationError("Sipariş ID gerekli")

    db_order = get_order_or_404(db, id)
    if is_terminal(db_order.status):
        raise ConflictError("Bu sipariş zaten tamamlanmış veya iptal edilmiş")

    table = get_order_table(db, db_order)
    order_number = db_order.order_number
    try:
        db.delete(db_order)
        sync_table_occupancy(db, table)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to delete order {id}: {str(e)}")
        raise UnexpectedError("Sipariş silinemedi")

    logger.info(f"Order {order_number} deleted")
    return {"success": True, "message": "Sipariş başarıyla silindi"}
