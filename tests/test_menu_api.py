def create_item(client, **overrides):
    payload = {"name": "Mercimek Çorbası", "price": 45.0, "category": "soup", "cookingTime": 10}
    payload.update(overrides)
    return client.post("/api/menu", json=payload)


def test_create_menu_item(client):
    response = create_item(client)
    assert response.status_code == 201
    item = response.json()["item"]
    assert item["name"] == "Mercimek Çorbası"
    assert item["available"] is True
    assert item["cookingTime"] == 10


def test_menu_item_validation(client):
    assert create_item(client, price=0).status_code == 400
    assert create_item(client, name="x").status_code == 400


def test_list_menu_filters(client):
    create_item(client)
    create_item(client, name="Künefe", category="dessert", available=False)

    assert len(client.get("/api/menu").json()["items"]) == 2
    soups = client.get("/api/menu", params={"category": "soup"}).json()["items"]
    assert [item["name"] for item in soups] == ["Mercimek Çorbası"]
    available = client.get("/api/menu", params={"available": "true"}).json()["items"]
    assert [item["name"] for item in available] == ["Mercimek Çorbası"]


def test_update_and_delete_menu_item(client):
    item_id = create_item(client).json()["item"]["id"]

    updated = client.put(f"/api/menu/{item_id}", json={"available": False, "price": 50.0}).json()["item"]
    assert updated["available"] is False
    assert updated["price"] == 50.0

    assert client.delete(f"/api/menu/{item_id}").json()["success"] is True
    assert client.put(f"/api/menu/{item_id}", json={"price": 1.0}).status_code == 404
    assert client.delete(f"/api/menu/{item_id}").status_code == 404


def test_update_rejects_null_for_required_fields(client):
    item_id = create_item(client).json()["item"]["id"]

    response = client.put(f"/api/menu/{item_id}", json={"price": None})
    assert response.status_code == 400
    assert response.json()["errors"] == ["Fiyat boş olamaz"]
    assert client.put(f"/api/menu/{item_id}", json={"name": None}).status_code == 400
    assert client.put(f"/api/menu/{item_id}", json={"available": None}).status_code == 400

    # nullable fields can still be cleared
    cleared = client.put(f"/api/menu/{item_id}", json={"category": None}).json()["item"]
    assert cleared["category"] is None
    assert cleared["price"] == 45.0
    assert cleared["available"] is True
