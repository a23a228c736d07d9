import os

# Must be set before the app (and its engine) is imported
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient

from app.main import app
from models.menu_management import MenuItem
from models.table_management import Table
from utils.database import Base, SessionLocal, engine


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_table():
    def _make_table(number="5", capacity=4, location="main"):
        db = SessionLocal()
        try:
            table = Table(number=number, capacity=capacity, location=location)
            db.add(table)
            db.commit()
            return table.id
        finally:
            db.close()

    return _make_table


@pytest.fixture
def make_menu_item():
    def _make_menu_item(name="Adana Kebap", price=50.0, cooking_time=None, is_available=True, image=None):
        db = SessionLocal()
        try:
            item = MenuItem(
                name=name,
                price=price,
                cooking_time=cooking_time,
                is_available=is_available,
                image=image,
                category="main",
            )
            db.add(item)
            db.commit()
            return item.id
        finally:
            db.close()

    return _make_menu_item


@pytest.fixture
def order_payload():
    def _order_payload(menu_item_id, table_number="5", price=50.0, quantity=2, **extra):
        payload = {
            "tableNumber": table_number,
            "items": [{"menuItemId": menu_item_id, "name": "Adana Kebap", "price": price, "quantity": quantity}],
        }
        payload.update(extra)
        return payload

    return _order_payload
