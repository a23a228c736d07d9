from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Enum, Boolean, JSON
from sqlalchemy.orm import relationship
from utils.database import Base
from datetime import datetime
import enum


class SessionStatus(str, enum.Enum):
    ACTIVE = "active"
    CLOSED = "closed"


class TableSession(Base):
    """Anonymous, time-bounded binding between a table and the devices ordering from it."""

    __tablename__ = "table_sessions"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String(36), unique=True, index=True, nullable=False)
    table_id = Column(Integer, ForeignKey("tables.id", ondelete="SET NULL"), nullable=True)
    table_number = Column(String(20), index=True, nullable=False)
    status = Column(Enum(SessionStatus), default=SessionStatus.ACTIVE, nullable=False, index=True)

    start_time = Column(DateTime, default=datetime.utcnow, nullable=False)
    expiry_time = Column(DateTime, nullable=False)
    last_activity = Column(DateTime, default=datetime.utcnow)
    closed_at = Column(DateTime, nullable=True)
    closed_by = Column(String, nullable=True)

    total_devices = Column(Integer, default=0, nullable=False)
    order_count = Column(Integer, default=0, nullable=False)
    total_amount = Column(Float, default=0.0, nullable=False)
    order_ids = Column(JSON, default=list, nullable=False)

    is_suspicious = Column(Boolean, default=False, nullable=False)
    flag_reasons = Column(JSON, default=list, nullable=False)
    last_order_time = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    table = relationship("Table", back_populates="sessions")
    devices = relationship(
        "SessionDevice",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="SessionDevice.id",
    )

    def is_expired(self, now: datetime) -> bool:
        return self.expiry_time <= now


class SessionDevice(Base):
    __tablename__ = "session_devices"

    id = Column(Integer, primary_key=True, index=True)
    session_pk = Column(Integer, ForeignKey("table_sessions.id", ondelete="CASCADE"), nullable=False)
    fingerprint = Column(String, nullable=False, index=True)
    ip_address = Column(String, default="unknown")
    user_agent = Column(String, default="unknown")
    browser = Column(String, default="unknown")
    os = Column(String, default="unknown")
    is_mobile = Column(Boolean, default=False)
    screen_resolution = Column(String, default="unknown")
    first_seen = Column(DateTime, default=datetime.utcnow)
    last_seen = Column(DateTime, default=datetime.utcnow)
    order_count = Column(Integer, default=0, nullable=False)

    # Relationships
    session = relationship("TableSession", back_populates="devices")
