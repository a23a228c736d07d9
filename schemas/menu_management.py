from pydantic import Field, ValidationInfo, field_validator
from typing import Optional
from datetime import datetime

from schemas.common import CamelModel

REQUIRED_LABELS = {"name": "Ürün adı", "price": "Fiyat", "is_available": "Durum"}


class MenuItemBase(CamelModel):
    name: str = Field(..., min_length=2, max_length=120)
    description: Optional[str] = None
    price: float = Field(..., gt=0)
    category: Optional[str] = None
    image: Optional[str] = None
    cooking_time: Optional[int] = Field(None, ge=0, le=600)


class MenuItemCreate(MenuItemBase):
    is_available: bool = Field(True, alias="available")


class MenuItemUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=2, max_length=120)
    description: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    category: Optional[str] = None
    image: Optional[str] = None
    cooking_time: Optional[int] = Field(None, ge=0, le=600)
    is_available: Optional[bool] = Field(None, alias="available")

    @field_validator("name", "price", "is_available", mode="before")
    @classmethod
    def reject_null(cls, value, info: ValidationInfo):
        # Omit a field to keep it; these columns are NOT NULL
        if value is None:
            raise ValueError(f"{REQUIRED_LABELS[info.field_name]} boş olamaz")
        return value


class MenuItemResponse(MenuItemBase):
    id: int
    is_available: bool = Field(..., alias="available")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
