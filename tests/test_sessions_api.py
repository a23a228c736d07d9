from datetime import datetime, timedelta

from models.session import SessionStatus, TableSession
from models.table_management import Table, TableStatus
from utils.database import SessionLocal

IPHONE_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)


def load_session(session_id):
    with SessionLocal() as db:
        table_session = db.query(TableSession).filter(TableSession.session_id == session_id).first()
        devices = [(device.fingerprint, device.browser, device.os, device.is_mobile) for device in table_session.devices]
        return table_session, devices


def expire_session(session_id):
    with SessionLocal() as db:
        table_session = db.query(TableSession).filter(TableSession.session_id == session_id).first()
        table_session.expiry_time = datetime.utcnow() - timedelta(minutes=1)
        db.commit()


def test_new_session_occupies_table(client, make_table):
    make_table("5")

    response = client.post("/api/sessions", json={"tableNumber": 5, "deviceInfo": {"fingerprint": "fp-1"}})
    assert response.status_code == 200
    body = response.json()
    assert body["isNew"] is True
    assert body["message"] == "Yeni oturum başlatıldı"
    session = body["session"]
    assert session["tableNumber"] == "5"
    assert session["deviceCount"] == 1
    assert session["orderCount"] == 0
    assert session["isNew"] is True

    start = datetime.fromisoformat(session["startTime"])
    expiry = datetime.fromisoformat(session["expiryTime"])
    assert expiry - start == timedelta(hours=4)

    with SessionLocal() as db:
        table = db.query(Table).filter(Table.number == "5").first()
        assert table.status == TableStatus.OCCUPIED
        assert table.current_session_id == session["sessionId"]
        assert table.last_session_at is not None


def test_second_device_reuses_active_session(client, make_table):
    make_table("5")
    first = client.post("/api/sessions", json={"tableNumber": "5", "deviceInfo": {"fingerprint": "fp-1"}}).json()

    second = client.post(
        "/api/sessions",
        json={"tableNumber": "05", "deviceInfo": {"fingerprint": "fp-2"}},
        headers={"User-Agent": IPHONE_AGENT, "X-Forwarded-For": "10.0.0.7, 172.16.0.1"},
    ).json()

    assert second["isNew"] is False
    assert second["message"] == "Aktif oturum bulundu"
    assert second["session"]["sessionId"] == first["session"]["sessionId"]
    assert second["session"]["deviceCount"] == 2
    assert second["deviceRegistration"]["isNewDevice"] is True

    stored, devices = load_session(first["session"]["sessionId"])
    assert stored.total_devices == 2
    assert [device[0] for device in devices] == ["fp-1", "fp-2"]
    assert devices[1][1:] == ("Safari", "iOS", True)


def test_known_device_is_not_counted_twice(client, make_table):
    make_table("5")
    first = client.post("/api/sessions", json={"tableNumber": "5", "deviceInfo": {"fingerprint": "fp-1"}}).json()
    again = client.post("/api/sessions", json={"tableNumber": "5", "deviceInfo": {"fingerprint": "fp-1"}}).json()

    assert again["session"]["sessionId"] == first["session"]["sessionId"]
    assert again["session"]["deviceCount"] == 1
    assert again["deviceRegistration"]["isNewDevice"] is False


def test_device_ip_from_forwarded_header(client, make_table):
    make_table("5")
    body = client.post(
        "/api/sessions",
        json={"tableNumber": "5", "deviceInfo": {"fingerprint": "fp-1", "browser": "Firefox"}},
        headers={"X-Forwarded-For": "10.0.0.7, 172.16.0.1"},
    ).json()

    with SessionLocal() as db:
        table_session = db.query(TableSession).filter(TableSession.session_id == body["session"]["sessionId"]).first()
        device = table_session.devices[0]
        assert device.ip_address == "10.0.0.7"
        assert device.browser == "Firefox"


def test_expired_session_is_replaced(client, make_table):
    make_table("5")
    old_id = client.post("/api/sessions", json={"tableNumber": "5"}).json()["session"]["sessionId"]
    expire_session(old_id)

    body = client.post("/api/sessions", json={"tableNumber": "5"}).json()
    assert body["isNew"] is True
    assert body["session"]["sessionId"] != old_id

    stored, _ = load_session(old_id)
    assert stored.status == SessionStatus.CLOSED
    assert stored.closed_by == "expired"


def test_session_for_unknown_table(client):
    response = client.post("/api/sessions", json={"tableNumber": "42"})
    assert response.status_code == 404
    assert response.json()["error"] == "Masa bulunamadı"


def test_session_requires_table_number(client):
    response = client.post("/api/sessions", json={"tableNumber": "  "})
    assert response.status_code == 400
    assert "Masa numarası gerekli" in response.json()["errors"]


def test_validate_session(client, make_table):
    make_table("5")
    session_id = client.post(
        "/api/sessions", json={"tableNumber": "5", "deviceInfo": {"fingerprint": "fp-1"}}
    ).json()["session"]["sessionId"]

    response = client.get("/api/sessions", params={"sessionId": session_id, "fingerprint": "fp-1"})
    assert response.status_code == 200
    body = response.json()
    assert body["valid"] is True
    assert body["canOrder"] is True
    assert body["deviceMatch"] is True
    assert body["session"]["isSuspicious"] is False
    assert body["session"]["deviceCount"] == 1


def test_validate_reports_device_mismatch(client, make_table):
    make_table("5")
    session_id = client.post(
        "/api/sessions", json={"tableNumber": "5", "deviceInfo": {"fingerprint": "fp-1"}}
    ).json()["session"]["sessionId"]

    body = client.get("/api/sessions", params={"sessionId": session_id, "fingerprint": "other"}).json()
    assert body["valid"] is True
    assert body["deviceMatch"] is False


def test_validate_failures(client, make_table):
    make_table("5")

    missing = client.get("/api/sessions")
    assert missing.status_code == 400
    assert missing.json()["valid"] is False

    unknown = client.get("/api/sessions", params={"sessionId": "nope"})
    assert unknown.status_code == 404
    assert unknown.json() == {
        "success": False,
        "valid": False,
        "error": "Oturum bulunamadı",
        "code": "SESSION_NOT_FOUND",
    }

    session_id = client.post("/api/sessions", json={"tableNumber": "5"}).json()["session"]["sessionId"]
    expire_session(session_id)
    expired = client.get("/api/sessions", params={"sessionId": session_id})
    assert expired.status_code == 401
    assert expired.json()["code"] == "SESSION_EXPIRED"
    assert expired.json()["valid"] is False


def test_extend_session(client, make_table):
    make_table("5")
    session_id = client.post("/api/sessions", json={"tableNumber": "5"}).json()["session"]["sessionId"]
    expire_session(session_id)

    response = client.put("/api/sessions", json={"sessionId": session_id, "action": "extend"})
    assert response.status_code == 200
    assert response.json()["message"] == "Oturum uzatıldı"
    assert datetime.fromisoformat(response.json()["expiryTime"]) > datetime.utcnow() + timedelta(hours=3)

    assert client.get("/api/sessions", params={"sessionId": session_id}).json()["valid"] is True


def test_extend_errors(client, make_table):
    make_table("5")
    session_id = client.post("/api/sessions", json={"tableNumber": "5"}).json()["session"]["sessionId"]

    assert client.put("/api/sessions", json={"sessionId": "nope", "action": "extend"}).status_code == 404
    assert client.put("/api/sessions", json={"sessionId": session_id, "action": "close"}).status_code == 400

    with SessionLocal() as db:
        table_session = db.query(TableSession).filter(TableSession.session_id == session_id).first()
        table_session.status = SessionStatus.CLOSED
        db.commit()

    closed = client.put("/api/sessions", json={"sessionId": session_id, "action": "extend"})
    assert closed.status_code == 400
    assert closed.json()["code"] == "SESSION_CLOSED"
