from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from datetime import datetime

from pydantic import ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from models.order_management import OrderStatus, PaymentStatus, OrderPriority
from schemas.common import CamelModel
from utils.exceptions import ValidationError, format_validation_errors
from utils.table_numbers import TableNumber


# Requests
class OrderItemCreate(CamelModel):
    # Business rules live in utils.order_rules.validate_order so that every
    # problem is reported at once, not just the first type error
    menu_item_id: Optional[Union[int, str]] = None
    name: Optional[str] = None
    price: Optional[float] = None
    quantity: Optional[int] = None
    notes: Optional[str] = None
    selected_options: Optional[List[Any]] = None


class OrderCreate(CamelModel):
    table_number: Optional[TableNumber] = None
    table_id: Optional[int] = None
    items: Optional[List[OrderItemCreate]] = None
    total_amount: Optional[float] = None
    customer_notes: Optional[str] = ""
    kitchen_notes: Optional[str] = ""
    priority: Optional[OrderPriority] = None
    estimated_time: Optional[int] = Field(None, gt=0)
    session_id: Optional[str] = None
    device_fingerprint: Optional[str] = None


class UpdateStatusAction(CamelModel):
    action: Literal["updateStatus"]
    id: int
    status: OrderStatus
    assigned_staff: Optional[str] = None


class UpdateItemStatusAction(CamelModel):
    action: Literal["updateItemStatus"]
    id: int
    item_index: int = Field(..., ge=0)
    item_status: OrderStatus


class UpdatePaymentAction(CamelModel):
    action: Literal["updatePayment"]
    id: int
    payment_status: PaymentStatus


class AddNotesAction(CamelModel):
    action: Literal["addNotes"]
    id: int
    customer_notes: Optional[str] = None
    kitchen_notes: Optional[str] = None


class CloseTableAction(CamelModel):
    action: Literal["closeTable"]
    table_number: TableNumber


class OrderPatch(CamelModel):
    """Generic field patch sent without an action. Status is deliberately not patchable."""

    model_config = ConfigDict(extra="forbid")

    id: int
    items: Optional[List[OrderItemCreate]] = None
    total_amount: Optional[float] = None
    customer_notes: Optional[str] = None
    kitchen_notes: Optional[str] = None
    priority: Optional[OrderPriority] = None
    estimated_time: Optional[int] = Field(None, gt=0)
    assigned_staff: Optional[str] = None


OrderAction = Annotated[
    Union[UpdateStatusAction, UpdateItemStatusAction, UpdatePaymentAction, AddNotesAction, CloseTableAction],
    Field(discriminator="action"),
]

order_action_adapter = TypeAdapter(OrderAction)


def parse_order_update(body: Dict[str, Any]):
    """Turn a PUT /orders body into one of the action models, or an OrderPatch when no action is given."""
    try:
        if body.get("action") is None:
            fields = {key: value for key, value in body.items() if key != "action"}
            return OrderPatch.model_validate(fields)
        return order_action_adapter.validate_python(body)
    except PydanticValidationError as e:
        raise ValidationError("Geçersiz güncelleme isteği", errors=format_validation_errors(e.errors()))


# Responses
class OrderItemResponse(CamelModel):
    id: int
    menu_item_id: Optional[int] = None
    name: str
    price: float
    quantity: int
    notes: Optional[str] = None
    selected_options: Optional[List[Any]] = None
    status: OrderStatus
    status_updated_at: Optional[datetime] = None
    added_at: Optional[datetime] = None
    image: Optional[str] = None


class OrderResponse(CamelModel):
    id: int
    order_number: str
    table_id: Optional[int] = None
    table_number: Optional[str] = None
    session_id: Optional[str] = None
    items: List[OrderItemResponse]
    total_amount: float
    status: OrderStatus
    payment_status: PaymentStatus
    priority: OrderPriority
    customer_notes: Optional[str] = ""
    kitchen_notes: Optional[str] = ""
    estimated_time: int
    assigned_staff: Optional[str] = None
    closed_by_table: bool = False
    timestamps: Dict[str, str] = {}
    created_at: datetime
    updated_at: Optional[datetime] = None


class TableGroupSummary(CamelModel):
    pending_count: int = 0
    preparing_count: int = 0
    ready_count: int = 0
    completed_count: int = 0
    cancelled_count: int = 0


class TableGroup(CamelModel):
    id: str
    table_number: str
    table_name: str
    order_number: str
    is_table_group: bool = True
    table_location: Optional[str] = None
    table_capacity: Optional[int] = None
    orders: List[OrderResponse]
    total_amount: float
    item_count: int
    customer_count: int
    status: OrderStatus
    all_statuses: List[OrderStatus]
    created_at: datetime
    last_order_at: datetime
    estimated_time: int
    priority: OrderPriority
    assigned_staff: Optional[str] = None
    customer_notes: str = ""
    summary: TableGroupSummary


class OrderStatistics(CamelModel):
    total_orders: int
    active_orders: int
    total_revenue: float
    avg_order_value: float
    pending: int
    confirmed: int
    preparing: int
    ready: int
    delivered: int
    completed: int
    cancelled: int
