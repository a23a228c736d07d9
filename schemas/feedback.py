from pydantic import Field, field_validator
from typing import Optional
from datetime import datetime

from models.feedback import FeedbackCategory, FeedbackStatus
from schemas.common import CamelModel
from utils.validators import sanitize_input

MIN_MESSAGE_LENGTH = 10
MAX_MESSAGE_LENGTH = 1000


class FeedbackCreate(CamelModel):
    category: FeedbackCategory
    rating: Optional[int] = Field(None, ge=1, le=5)
    message: str

    @field_validator("category", mode="before")
    @classmethod
    def lowercase_category(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("message", mode="before")
    @classmethod
    def clean_message(cls, value):
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Mesaj gerekli")
        message = sanitize_input(value)
        if len(message) < MIN_MESSAGE_LENGTH:
            raise ValueError(f"Mesaj en az {MIN_MESSAGE_LENGTH} karakter olmalıdır")
        if len(message) > MAX_MESSAGE_LENGTH:
            raise ValueError(f"Mesaj en fazla {MAX_MESSAGE_LENGTH} karakter olabilir")
        return message


class FeedbackUpdate(CamelModel):
    id: int
    status: Optional[FeedbackStatus] = None
    admin_notes: Optional[str] = None

    @field_validator("admin_notes", mode="before")
    @classmethod
    def clean_admin_notes(cls, value):
        if value is None:
            return value
        return sanitize_input(value)


class FeedbackResponse(CamelModel):
    id: int
    category: FeedbackCategory
    category_label: str
    rating: Optional[int] = None
    message: str
    status: FeedbackStatus
    admin_notes: Optional[str] = None
    created_at: datetime
    read_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
