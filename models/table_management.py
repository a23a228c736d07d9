from sqlalchemy import Column, Integer, String, Enum, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from utils.database import Base
import enum


class TableStatus(str, enum.Enum):
    EMPTY = "empty"
    OCCUPIED = "occupied"


class Table(Base):
    __tablename__ = "tables"

    id = Column(Integer, primary_key=True, index=True)
    number = Column(String(20), unique=True, index=True, nullable=False)  # canonical form, see utils.table_numbers
    capacity = Column(Integer, nullable=False)
    location = Column(String, default="main", nullable=False)
    status = Column(Enum(TableStatus), default=TableStatus.EMPTY, nullable=False)
    notes = Column(Text, default="")
    qr_code = Column(String, default="")
    current_session_id = Column(String, nullable=True)
    last_order_at = Column(DateTime, nullable=True)
    last_session_at = Column(DateTime, nullable=True)
    last_closed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    orders = relationship("Order", back_populates="table")
    sessions = relationship("TableSession", back_populates="table")
