from pydantic import Field
from typing import Optional
from datetime import datetime

from models.table_management import TableStatus
from schemas.common import CamelModel
from utils.table_numbers import TableNumber


class TableBase(CamelModel):
    number: TableNumber
    capacity: int = Field(..., gt=0, le=100)
    location: str = "main"
    notes: Optional[str] = ""


class TableCreate(TableBase):
    status: TableStatus = TableStatus.EMPTY


class TableUpdate(CamelModel):
    id: int
    number: Optional[TableNumber] = None
    capacity: Optional[int] = Field(None, gt=0, le=100)
    location: Optional[str] = None
    status: Optional[TableStatus] = None
    notes: Optional[str] = None
    qr_code: Optional[str] = None


class TableResponse(TableBase):
    id: int
    status: TableStatus
    qr_code: Optional[str] = ""
    current_session_id: Optional[str] = None
    last_order_at: Optional[datetime] = None
    last_session_at: Optional[datetime] = None
    last_closed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
