from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional

from utils.database import get_db
from models.menu_management import MenuItem
from schemas.menu_management import MenuItemCreate, MenuItemUpdate, MenuItemResponse
from utils.exceptions import NotFoundError, UnexpectedError
import logging
# Setup logging
logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/menu", tags=["menu_management"])


def get_menu_item_or_404(db: Session, item_id: int) -> MenuItem:
    db_item = db.query(MenuItem).filter(MenuItem.id == item_id).first()
    if not db_item:
        raise NotFoundError("Ürün bulunamadı")
    return db_item


@router.get("")
async def list_menu_items(
    category: Optional[str] = None,
    available: Optional[bool] = None,
    db: Session = Depends(get_db),
):
    query = db.query(MenuItem)
    if category:
        query = query.filter(MenuItem.category == category)
    if available is not None:
        query = query.filter(MenuItem.is_available == available)

    items = query.order_by(MenuItem.category, MenuItem.name).all()
    return {"success": True, "items": [MenuItemResponse.model_validate(item).to_json() for item in items]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_menu_item(item: MenuItemCreate, db: Session = Depends(get_db)):
    try:
        db_item = MenuItem(**item.model_dump())
        db.add(db_item)
        db.commit()
        db.refresh(db_item)
        logger.info(f"Menu item {db_item.id} ({db_item.name}) created")
        return {"success": True, "item": MenuItemResponse.model_validate(db_item).to_json()}
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create menu item: {str(e)}")
        raise UnexpectedError("Ürün oluşturulamadı")


@router.put("/{item_id}")
async def update_menu_item(item_id: int, item_update: MenuItemUpdate, db: Session = Depends(get_db)):
    db_item = get_menu_item_or_404(db, item_id)

    # Existing orders keep their own name/price snapshot
    try:
        for field, value in item_update.model_dump(exclude_unset=True).items():
            setattr(db_item, field, value)
        db.commit()
        db.refresh(db_item)
        logger.info(f"Menu item {item_id} updated")
        return {"success": True, "item": MenuItemResponse.model_validate(db_item).to_json()}
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to update menu item {item_id}: {str(e)}")
        raise UnexpectedError("Ürün güncellenemedi")


@router.delete("/{item_id}")
async def delete_menu_item(item_id: int, db: Session = Depends(get_db)):
    db_item = get_menu_item_or_404(db, item_id)

    try:
        db.delete(db_item)
        db.commit()
        logger.info(f"Menu item {item_id} deleted")
        return {"success": True, "message": "Ürün silindi"}
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to delete menu item {item_id}: {str(e)}")
        raise UnexpectedError("Ürün silinemedi")
