from models.feedback import Feedback
from utils.database import SessionLocal

MESSAGE = "Servis çok hızlıydı, teşekkürler!"


def feedback_count():
    with SessionLocal() as db:
        return db.query(Feedback).count()


def submit(client, ip="10.1.1.1", **overrides):
    payload = {"category": "service", "rating": 5, "message": MESSAGE}
    payload.update(overrides)
    return client.post("/api/feedback", json=payload, headers={"X-Forwarded-For": ip})


def test_submit_feedback(client):
    response = submit(client, category="FOOD")
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Geri bildiriminiz başarıyla kaydedildi"

    with SessionLocal() as db:
        stored = db.query(Feedback).filter(Feedback.id == body["feedbackId"]).first()
        assert stored.category.value == "food"
        assert stored.status.value == "new"
        assert stored.ip_address == "10.1.1.1"


def test_message_is_sanitized(client):
    response = submit(client, message="<script>alert(1)</script><b>Yemekler</b> 'harika'; idi")
    assert response.status_code == 201

    feedbacks = client.get("/api/feedback").json()["feedbacks"]
    assert feedbacks[0]["message"] == "Yemekler harika idi"


def test_message_length_checked_after_sanitizing(client):
    response = submit(client, message="<b>kısa</b>;;;;;;;;;;")
    assert response.status_code == 400
    assert response.json()["errors"] == ["Mesaj en az 10 karakter olmalıdır"]

    too_long = submit(client, message="a" * 1001)
    assert too_long.status_code == 400
    assert feedback_count() == 0


def test_invalid_category_and_rating(client):
    assert submit(client, category="music").status_code == 400
    assert submit(client, rating=6).status_code == 400
    assert submit(client, rating=0).status_code == 400
    assert submit(client, rating=None).status_code == 201


def test_fourth_submission_within_window_is_rate_limited(client):
    for _ in range(3):
        assert submit(client).status_code == 201

    response = submit(client)
    assert response.status_code == 429
    assert response.json() == {"success": False, "error": "Çok fazla istek. Lütfen biraz bekleyin."}
    assert feedback_count() == 3

    # other clients are not affected
    assert submit(client, ip="10.9.9.9").status_code == 201


def test_list_feedback_hides_ip_and_filters(client):
    submit(client, ip="10.0.0.1", category="food", rating=4)
    submit(client, ip="10.0.0.2", category="staff", rating=2)
    submit(client, ip="10.0.0.3", category="food", rating=None)

    body = client.get("/api/feedback").json()
    assert body["total"] == 3
    assert "ipAddress" not in body["feedbacks"][0]
    assert body["feedbacks"][0]["categoryLabel"] == "Ürün & Lezzet"

    food = client.get("/api/feedback", params={"category": "food"}).json()
    assert food["total"] == 2

    limited = client.get("/api/feedback", params={"limit": 1}).json()
    assert limited["total"] == 1


def test_feedback_statistics(client):
    submit(client, ip="10.0.0.1", category="food", rating=4)
    submit(client, ip="10.0.0.2", category="staff", rating=5)
    submit(client, ip="10.0.0.3", category="food", rating=5)
    submit(client, ip="10.0.0.4", category="other", rating=None)

    stats = client.get("/api/feedback", params={"stats": "true"}).json()["statistics"]
    assert stats["total"] == 4
    assert stats["unread"] == 4
    assert stats["byCategory"] == {"service": 0, "food": 2, "staff": 1, "other": 1}
    assert stats["averageRating"] == 4.7
    assert stats["ratingDistribution"] == {"5": 2, "4": 1, "3": 0, "2": 0, "1": 0}


def test_update_feedback_status(client):
    feedback_id = submit(client).json()["feedbackId"]

    read = client.put("/api/feedback", json={"id": feedback_id, "status": "read"}).json()["feedback"]
    assert read["status"] == "read"
    assert read["readAt"] is not None

    resolved = client.put(
        "/api/feedback",
        json={"id": feedback_id, "status": "resolved", "adminNotes": "<i>Personel</i> bilgilendirildi;"},
    ).json()["feedback"]
    assert resolved["status"] == "resolved"
    assert resolved["resolvedAt"] is not None
    assert resolved["readAt"] == read["readAt"]
    assert resolved["adminNotes"] == "Personel bilgilendirildi"


def test_update_unknown_feedback(client):
    assert client.put("/api/feedback", json={"id": 77, "status": "read"}).status_code == 404
    assert client.put("/api/feedback", json={"id": 77, "status": "archived"}).status_code == 400


def test_delete_feedback(client):
    feedback_id = submit(client).json()["feedbackId"]

    assert client.delete("/api/feedback").status_code == 400
    assert client.delete(f"/api/feedback?id={feedback_id}").json()["success"] is True
    assert client.delete(f"/api/feedback?id={feedback_id}").status_code == 404
    assert feedback_count() == 0
