from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import or_
from typing import Optional
from datetime import datetime
import logging

from utils.database import get_db
from models.table_management import Table, TableStatus
from models.order_management import Order
from schemas.table_management import TableCreate, TableUpdate, TableResponse
from utils.exceptions import ConflictError, NotFoundError, UnexpectedError, ValidationError
from utils.order_status import TERMINAL_STATUSES
from utils.table_numbers import normalize_table_number
from utils.validators import validate_table_number_uniqueness


logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/admin/tables", tags=["table_management"])


# Helpers shared with the order and session routes
def find_table(db: Session, table_number: Optional[str] = None, table_id: Optional[int] = None) -> Optional[Table]:
    """Look a table up by primary key or canonical number"""
    if table_id is not None:
        return db.query(Table).filter(Table.id == table_id).first()
    if table_number:
        return db.query(Table).filter(Table.number == normalize_table_number(table_number)).first()
    return None


def active_orders_query(db: Session, table: Table):
    return db.query(Order).filter(
        or_(Order.table_id == table.id, Order.table_number == table.number),
        Order.status.notin_(TERMINAL_STATUSES),
    )


def sync_table_occupancy(db: Session, table: Optional[Table]):
    """Free the table once none of its orders is still in progress. Caller commits."""
    if table is None:
        return
    db.flush()
    if table.status == TableStatus.OCCUPIED and active_orders_query(db, table).count() == 0:
        table.status = TableStatus.EMPTY
        table.current_session_id = None
        logger.info(f"Table {table.number} has no active orders left, marked empty")


def mark_table_occupied(table: Table, when: datetime):
    table.status = TableStatus.OCCUPIED
    table.last_order_at = when


# Table Management Endpoints
@router.get("")
async def list_tables(
    table_status: Optional[TableStatus] = Query(None, alias="status"),
    location: Optional[str] = None,
    db: Session = Depends(get_db),
):
    query = db.query(Table)
    if table_status:
        query = query.filter(Table.status == table_status)
    if location:
        query = query.filter(Table.location == location)

    tables = query.order_by(Table.number).all()
    logger.info(f"Retrieved {len(tables)} tables")
    return {
        "success": True,
        "tables": [TableResponse.model_validate(table).to_json() for table in tables],
        "count": len(tables),
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_table(table: TableCreate, db: Session = Depends(get_db)):
    validate_table_number_uniqueness(db, table.number)

    try:
        db_table = Table(**table.model_dump())
        db.add(db_table)
        db.commit()
        db.refresh(db_table)
        logger.info(f"Table {db_table.number} created with id {db_table.id}")
        return {
            "success": True,
            "message": "Masa oluşturuldu",
            "table": TableResponse.model_validate(db_table).to_json(),
        }
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create table: {str(e)}")
        raise UnexpectedError("Masa oluşturulamadı")


@router.put("")
async def update_table(table_update: TableUpdate, db: Session = Depends(get_db)):
    db_table = find_table(db, table_id=table_update.id)
    if not db_table:
        raise NotFoundError("Masa bulunamadı")

    fields = table_update.model_dump(exclude_unset=True, exclude={"id"})
    if fields.get("number"):
        validate_table_number_uniqueness(db, fields["number"], exclude_id=db_table.id)

    try:
        for field, value in fields.items():
            if value is None and field in ("number", "capacity", "location", "status"):
                continue
            setattr(db_table, field, value)
        if fields.get("status") == TableStatus.EMPTY:
            db_table.current_session_id = None
        db.commit()
        db.refresh(db_table)
        logger.info(f"Table {db_table.id} updated: {sorted(fields)}")
        return {
            "success": True,
            "message": "Masa güncellendi",
            "table": TableResponse.model_validate(db_table).to_json(),
        }
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update table {table_update.id}: {str(e)}")
        raise UnexpectedError("Masa güncellenemedi")


@router.delete("")
async def delete_table(id: Optional[int] = None, db: Session = Depends(get_db)):
    if id is None:
        raise ValidationError("Masa ID gerekli")

    db_table = find_table(db, table_id=id)
    if not db_table:
        raise NotFoundError("Masa bulunamadı")

    if active_orders_query(db, db_table).first():
        raise ConflictError("Bu masanın aktif siparişi bulunuyor. Önce siparişleri tamamlayın.")

    try:
        db.delete(db_table)
        db.commit()
        logger.info(f"Table {id} deleted")
        return {"success": True, "message": "Masa başarıyla silindi"}
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to delete table {id}: {str(e)}")
        raise UnexpectedError("Masa silinemedi")
