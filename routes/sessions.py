from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import or_
from typing import Optional
from datetime import datetime, timedelta
import logging
import uuid

from utils.database import get_db
from utils.config import SESSION_DURATION_HOURS
from models.order_management import Order
from models.session import SessionDevice, SessionStatus, TableSession
from models.table_management import Table, TableStatus
from schemas.session import DeviceInfo, SessionCreate, SessionDetails, SessionSummary, SessionUpdate
from utils.exceptions import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    UnexpectedError,
    ValidationError,
)
from utils.request_info import get_client_ip, get_user_agent, parse_user_agent
from routes.table_management import find_table


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/sessions", tags=["sessions"])


def session_lifetime() -> timedelta:
    return timedelta(hours=SESSION_DURATION_HOURS)


def active_sessions_query(db: Session, table: Table):
    return db.query(TableSession).filter(
        or_(TableSession.table_id == table.id, TableSession.table_number == table.number),
        TableSession.status == SessionStatus.ACTIVE,
    )


def close_table_sessions(db: Session, table: Table, closed_by: str, now: datetime, only_expired: bool = False) -> int:
    """Close the table's active sessions and return how many were closed. Caller commits."""
    query = active_sessions_query(db, table)
    if only_expired:
        query = query.filter(TableSession.expiry_time <= now)

    closed = 0
    for table_session in query.all():
        table_session.status = SessionStatus.CLOSED
        table_session.closed_at = now
        table_session.closed_by = closed_by
        closed += 1

    if closed:
        logger.info(f"Closed {closed} session(s) of table {table.number} ({closed_by})")
    return closed


def record_session_order(
    db: Session,
    session_id: str,
    order: Order,
    fingerprint: Optional[str],
    now: datetime,
) -> Optional[TableSession]:
    """
    Add a freshly created order to its session's aggregates. Counters are
    written as SQL increments so concurrent checkouts on one table add up.
    An unknown session id is not an error; the order stands on its own.
    """
    table_session = db.query(TableSession).filter(TableSession.session_id == session_id).first()
    if not table_session:
        logger.warning(f"Order {order.order_number} references unknown session {session_id}, ignoring")
        return None

    table_session.order_count = TableSession.order_count + 1
    table_session.total_amount = TableSession.total_amount + order.total_amount
    table_session.order_ids = list(table_session.order_ids or []) + [order.id]
    table_session.last_activity = now
    table_session.last_order_time = now

    if fingerprint:
        device = db.query(SessionDevice).filter(
            SessionDevice.session_pk == table_session.id,
            SessionDevice.fingerprint == fingerprint,
        ).first()
        if device:
            device.order_count = SessionDevice.order_count + 1
            device.last_seen = now

    return table_session


def register_device(
    table_session: TableSession,
    device_info: Optional[DeviceInfo],
    request: Request,
    now: datetime,
) -> bool:
    """Attach the requesting device to the session. Returns True when it was not seen before."""
    info = device_info or DeviceInfo()
    fingerprint = info.fingerprint or "unknown"
    ip_address = get_client_ip(request)
    user_agent = info.user_agent or get_user_agent(request)

    for device in table_session.devices:
        if device.fingerprint == fingerprint:
            device.last_seen = now
            device.ip_address = ip_address
            device.user_agent = user_agent
            return False

    browser, os_name, is_mobile = parse_user_agent(user_agent)
    table_session.devices.append(
        SessionDevice(
            fingerprint=fingerprint,
            ip_address=ip_address,
            user_agent=user_agent,
            browser=info.browser or browser,
            os=info.os or os_name,
            is_mobile=info.is_mobile if info.is_mobile is not None else is_mobile,
            screen_resolution=info.screen_resolution or "unknown",
            first_seen=now,
            last_seen=now,
            order_count=0,
        )
    )
    if table_session.id is None:
        table_session.total_devices = 1
    else:
        table_session.total_devices = TableSession.total_devices + 1
    return True


def summarize(table_session: TableSession, is_new: bool) -> SessionSummary:
    return SessionSummary(
        session_id=table_session.session_id,
        table_number=table_session.table_number,
        start_time=table_session.start_time,
        expiry_time=table_session.expiry_time,
        order_count=table_session.order_count or 0,
        total_amount=table_session.total_amount or 0.0,
        device_count=table_session.total_devices or 0,
        is_new=is_new,
    )


@router.post("")
async def create_or_reuse_session(payload: SessionCreate, request: Request, db: Session = Depends(get_db)):
    table = find_table(db, table_number=payload.table_number)
    if not table:
        raise NotFoundError("Masa bulunamadı")

    now = datetime.utcnow()
    try:
        existing = active_sessions_query(db, table).filter(TableSession.expiry_time > now).first()
        if existing:
            is_new_device = register_device(existing, payload.device_info, request, now)
            existing.last_activity = now
            db.commit()
            db.refresh(existing)
            logger.info(f"Reusing session {existing.session_id} for table {table.number}")
            return {
                "success": True,
                "session": summarize(existing, is_new=False).to_json(),
                "isNew": False,
                "deviceRegistration": {
                    "registered": True,
                    "isNewDevice": is_new_device,
                    "deviceCount": existing.total_devices,
                },
                "message": "Aktif oturum bulundu",
            }

        close_table_sessions(db, table, closed_by="expired", now=now, only_expired=True)

        table_session = TableSession(
            session_id=str(uuid.uuid4()),
            table_id=table.id,
            table_number=table.number,
            status=SessionStatus.ACTIVE,
            start_time=now,
            expiry_time=now + session_lifetime(),
            last_activity=now,
            order_count=0,
            total_amount=0.0,
            order_ids=[],
            flag_reasons=[],
        )
        register_device(table_session, payload.device_info, request, now)
        db.add(table_session)

        table.status = TableStatus.OCCUPIED
        table.current_session_id = table_session.session_id
        table.last_session_at = now

        db.commit()
        db.refresh(table_session)
        logger.info(f"New session {table_session.session_id} started for table {table.number}")
        return {
            "success": True,
            "session": summarize(table_session, is_new=True).to_json(),
            "isNew": True,
            "message": "Yeni oturum başlatıldı",
        }
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create session for table {table.number}: {str(e)}")
        raise UnexpectedError("Oturum oluşturulamadı")


@router.get("")
async def validate_session(
    session_id: Optional[str] = Query(None, alias="sessionId"),
    fingerprint: Optional[str] = None,
    db: Session = Depends(get_db),
):
    if not session_id:
        raise ValidationError("Session ID gerekli", payload={"valid": False})

    table_session = db.query(TableSession).filter(TableSession.session_id == session_id).first()
    if not table_session:
        raise NotFoundError("Oturum bulunamadı", code="SESSION_NOT_FOUND", payload={"valid": False})
    if table_session.status == SessionStatus.CLOSED:
        raise UnauthorizedError("Oturum kapatılmış", code="SESSION_CLOSED", payload={"valid": False})

    now = datetime.utcnow()
    if table_session.is_expired(now):
        raise UnauthorizedError("Oturum süresi dolmuş", code="SESSION_EXPIRED", payload={"valid": False})

    # Soft check: a different device on the same session is only reported
    device_match = True
    if fingerprint:
        device_match = any(device.fingerprint == fingerprint for device in table_session.devices)

    try:
        table_session.last_activity = now
        db.commit()
        db.refresh(table_session)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to refresh session {session_id}: {str(e)}")
        raise UnexpectedError("Doğrulama hatası", payload={"valid": False})

    details = SessionDetails(
        session_id=table_session.session_id,
        table_number=table_session.table_number,
        start_time=table_session.start_time,
        expiry_time=table_session.expiry_time,
        last_activity=table_session.last_activity,
        order_count=table_session.order_count or 0,
        total_amount=table_session.total_amount or 0.0,
        device_count=table_session.total_devices or 0,
        is_suspicious=bool(table_session.is_suspicious),
    )
    return {
        "success": True,
        "valid": True,
        "canOrder": True,
        "session": details.to_json(),
        "deviceMatch": device_match,
    }


@router.put("")
async def update_session(payload: SessionUpdate, db: Session = Depends(get_db)):
    table_session = db.query(TableSession).filter(TableSession.session_id == payload.session_id).first()
    if not table_session:
        raise NotFoundError("Oturum bulunamadı", code="SESSION_NOT_FOUND")

    if payload.action != "extend":
        raise ValidationError("Geçersiz action")

    if table_session.status == SessionStatus.CLOSED:
        raise ConflictError("Kapatılmış oturum uzatılamaz", code="SESSION_CLOSED")

    try:
        table_session.expiry_time = datetime.utcnow() + session_lifetime()
        db.commit()
        db.refresh(table_session)
        logger.info(f"Session {table_session.session_id} extended until {table_session.expiry_time}")
        return {
            "success": True,
            "message": "Oturum uzatıldı",
            "expiryTime": table_session.expiry_time.isoformat(),
        }
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to extend session {payload.session_id}: {str(e)}")
        raise UnexpectedError("Güncelleme hatası")
