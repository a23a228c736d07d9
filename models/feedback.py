from sqlalchemy import Column, Integer, String, DateTime, Enum, Text
from utils.database import Base
from datetime import datetime
import enum


class FeedbackCategory(str, enum.Enum):
    SERVICE = "service"
    FOOD = "food"
    STAFF = "staff"
    OTHER = "other"


class FeedbackStatus(str, enum.Enum):
    NEW = "new"
    READ = "read"
    RESOLVED = "resolved"


CATEGORY_LABELS = {
    FeedbackCategory.SERVICE: "Hizmet Kalitesi",
    FeedbackCategory.FOOD: "Ürün & Lezzet",
    FeedbackCategory.STAFF: "Personel",
    FeedbackCategory.OTHER: "Diğer",
}


class Feedback(Base):
    __tablename__ = "feedbacks"

    id = Column(Integer, primary_key=True, index=True)
    category = Column(Enum(FeedbackCategory), nullable=False, index=True)
    rating = Column(Integer, nullable=True)
    message = Column(Text, nullable=False)
    status = Column(Enum(FeedbackStatus), default=FeedbackStatus.NEW, nullable=False, index=True)
    admin_notes = Column(Text, nullable=True)
    # Only used for rate limiting, never returned to clients
    ip_address = Column(String, index=True, nullable=False)
    user_agent = Column(String, default="unknown")
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    read_at = Column(DateTime, nullable=True)
    resolved_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def category_label(self) -> str:
        return CATEGORY_LABELS.get(self.category, str(self.category))
