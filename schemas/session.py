from pydantic import Field
from typing import Optional
from datetime import datetime

from schemas.common import CamelModel
from utils.table_numbers import TableNumber


class DeviceInfo(CamelModel):
    fingerprint: Optional[str] = None
    user_agent: Optional[str] = None
    browser: Optional[str] = None
    os: Optional[str] = None
    is_mobile: Optional[bool] = None
    screen_resolution: Optional[str] = None


class SessionCreate(CamelModel):
    table_number: TableNumber
    device_info: Optional[DeviceInfo] = None


class SessionUpdate(CamelModel):
    session_id: str = Field(..., min_length=1)
    action: str


class SessionSummary(CamelModel):
    session_id: str
    table_number: str
    start_time: datetime
    expiry_time: datetime
    order_count: int
    total_amount: float
    device_count: int = 0
    is_new: bool = False


class SessionDetails(CamelModel):
    session_id: str
    table_number: str
    start_time: datetime
    expiry_time: datetime
    last_activity: Optional[datetime] = None
    order_count: int
    total_amount: float
    device_count: int = 0
    is_suspicious: bool = False
