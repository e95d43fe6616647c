from lucy.models import Notification, NotificationType


def _payload(customer, service, **overrides):
    data = {
        "client_id": customer.id,
        "service_id": service.id,
        "date": "2026-03-10T00:00:00",
        "start_time": "10:00",
        "end_time": "10:30",
    }
    data.update(overrides)
    return data


def test_create_appointment_with_reminder_notifies(client, db, customer, service, user):
    resp = client.post("/api/appointments/", json=_payload(customer, service))
    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "SCHEDULED"
    assert body["user_id"] == user.id
    assert body["service"]["name"] == "Cera"

    notifications = db.query(Notification).filter(Notification.type == NotificationType.APPOINTMENT).all()
    assert len(notifications) == 1
    assert "Ana García" in notifications[0].message


def test_end_time_must_follow_start_time(client, customer, service):
    resp = client.post("/api/appointments/", json=_payload(customer, service, start_time="11:00", end_time="10:00"))
    assert resp.status_code == 422

    created = client.post("/api/appointments/", json=_payload(customer, service)).json()
    resp = client.put(f"/api/appointments/{created['id']}", json={"end_time": "09:00"})
    assert resp.status_code == 400


def test_appointments_by_date(client, customer, service):
    client.post("/api/appointments/", json=_payload(customer, service, date="2026-03-10T00:00:00"))
    client.post("/api/appointments/", json=_payload(customer, service, date="2026-03-11T00:00:00", reminder=False))

    day = client.get("/api/appointments/date/2026-03-11").json()
    assert len(day) == 1

    ranged = client.get("/api/appointments/", params={"start_date": "2026-03-10", "end_date": "2026-03-11"}).json()
    assert len(ranged) == 2


def test_update_status(client, customer, service):
    created = client.post("/api/appointments/", json=_payload(customer, service)).json()
    resp = client.put(f"/api/appointments/{created['id']}", json={"status": "CONFIRMED"})
    assert resp.json()["status"] == "CONFIRMED"


def test_unknown_client_is_404(client, service):
    resp = client.post("/api/appointments/", json={
        "client_id": 999, "service_id": service.id, "date": "2026-03-10T00:00:00",
        "start_time": "10:00", "end_time": "10:30",
    })
    assert resp.status_code == 404
