from datetime import date

from sqlalchemy import func, select

from placecell.models import CampusDrive, DateRequest


def lock(client, headers, company, drive_date, **extra):
    payload = {"company_id": company.id, "drive_date": drive_date, **extra}
    return client.post("/api/drives", json=payload, headers=headers)


def scheduled_count(db, drive_date):
    db.expire_all()
    return db.scalar(
        select(func.count()).select_from(CampusDrive).where(
            CampusDrive.drive_date == drive_date, CampusDrive.status == "scheduled"
        )
    )


def test_lock_free_date(client, db, priya, acme):
    response = lock(client, priya, acme, "2025-03-10", venue="Main Auditorium")

    assert response.status_code == 201
    body = response.json()
    assert body["outcome"] == "locked"
    assert body["drive"]["coordinator_name"] == "Priya"
    assert body["drive"]["company_name"] == "Acme"
    assert body["drive"]["status"] == "scheduled"
    assert body["drive"]["registered_count"] == 0
    assert scheduled_count(db, date(2025, 3, 10)) == 1


def test_lock_taken_date_names_holder(client, db, priya, bajrang, acme, globex):
    assert lock(client, priya, acme, "2025-03-10").status_code == 201

    response = lock(client, bajrang, globex, "2025-03-10")

    assert response.status_code == 409
    body = response.json()
    assert "Priya" in body["detail"]
    assert "Acme" in body["detail"]
    assert body["locked_by"] == "Priya"
    assert body["locked_company"] == "Acme"
    assert scheduled_count(db, date(2025, 3, 10)) == 1


def test_second_lock_same_date_same_company_is_refused(client, db, priya, acme):
    assert lock(client, priya, acme, "2025-03-10").status_code == 201

    response = lock(client, priya, acme, "2025-03-10")

    assert response.status_code == 409
    assert scheduled_count(db, date(2025, 3, 10)) == 1


def test_blocked_date_without_request_text_is_refused(client, db, priya, acme, winter_break):
    response = lock(client, priya, acme, "2024-12-22")

    assert response.status_code == 409
    body = response.json()
    assert body["code"] == "date_blocked"
    assert body["reason"] == "Winter break"
    assert body["start_date"] == "2024-12-20"
    assert scheduled_count(db, date(2024, 12, 22)) == 0


def test_blocked_date_routes_to_date_request(client, db, priya, acme, winter_break):
    response = lock(
        client, priya, acme, "2024-12-22",
        request_description="Urgent: only slot company offered",
    )

    assert response.status_code == 202
    body = response.json()
    assert body["outcome"] == "request_created"
    assert body["drive"] is None
    assert body["date_request"]["status"] == "pending"
    assert body["date_request"]["coordinator_name"] == "Priya"
    assert body["date_request"]["company_name"] == "Acme"
    assert scheduled_count(db, date(2024, 12, 22)) == 0


def test_day_before_blocked_period_locks(client, db, priya, acme, winter_break):
    assert lock(client, priya, acme, "2024-12-19").status_code == 201
    assert lock(client, priya, acme, "2024-12-20").status_code == 409


def test_approved_request_lets_lock_through(client, db, priya, admin, acme, winter_break):
    created = lock(client, priya, acme, "2024-12-22", request_description="Only slot offered")
    request_id = created.json()["date_request"]["id"]

    approved = client.post(f"/api/date-requests/{request_id}/approve", json={}, headers=admin)
    assert approved.status_code == 200

    # Approval alone does not lock the date
    assert scheduled_count(db, date(2024, 12, 22)) == 0

    response = lock(client, priya, acme, "2024-12-22")
    assert response.status_code == 201
    assert scheduled_count(db, date(2024, 12, 22)) == 1


def test_approval_is_personal(client, db, priya, bajrang, admin, acme, winter_break):
    created = lock(client, priya, acme, "2024-12-22", request_description="Only slot offered")
    client.post(f"/api/date-requests/{created.json()['date_request']['id']}/approve", headers=admin)

    response = lock(client, bajrang, acme, "2024-12-22")
    assert response.status_code == 409
    assert response.json()["code"] == "date_blocked"


def test_only_holder_can_unlock(client, db, priya, bajrang, acme):
    drive_id = lock(client, priya, acme, "2025-03-10").json()["drive"]["id"]

    refused = client.delete(f"/api/drives/{drive_id}", headers=bajrang)
    assert refused.status_code == 403
    assert "Priya" in refused.json()["detail"]
    assert scheduled_count(db, date(2025, 3, 10)) == 1

    assert client.delete(f"/api/drives/{drive_id}", headers=priya).status_code == 200
    assert scheduled_count(db, date(2025, 3, 10)) == 0


def test_unlocked_date_can_be_taken_by_another_company(client, db, priya, bajrang, acme, globex):
    drive_id = lock(client, priya, acme, "2025-03-10").json()["drive"]["id"]
    client.delete(f"/api/drives/{drive_id}", headers=priya)

    response = lock(client, bajrang, globex, "2025-03-10")
    assert response.status_code == 201
    assert response.json()["drive"]["company_name"] == "Globex"


def test_admin_cannot_unlock_someone_elses_drive(client, priya, admin, acme):
    drive_id = lock(client, priya, acme, "2025-03-10").json()["drive"]["id"]
    assert client.delete(f"/api/drives/{drive_id}", headers=admin).status_code == 403


def test_holder_updates_counts(client, priya, bajrang, acme):
    drive_id = lock(client, priya, acme, "2025-03-10").json()["drive"]["id"]

    response = client.put(
        f"/api/drives/{drive_id}",
        json={"registered_count": 120, "appeared_count": 98, "selected_count": 12, "venue": "Hall B"},
        headers=priya,
    )
    assert response.status_code == 200
    assert response.json()["selected_count"] == 12
    assert response.json()["venue"] == "Hall B"

    assert client.put(f"/api/drives/{drive_id}", json={"venue": "Lab"}, headers=bajrang).status_code == 403
    assert client.put(f"/api/drives/{drive_id}", json={"registered_count": -1}, headers=priya).status_code == 422


def test_availability_and_calendar(client, priya, bajrang, acme, globex, winter_break):
    lock(client, priya, acme, "2024-12-18")

    other = client.get("/api/drives/availability", params={"date": "2024-12-18", "company_id": globex.id},
                       headers=bajrang).json()
    assert other["is_locked"] is True
    assert other["locked_by"]["coordinator_name"] == "Priya"

    own = client.get("/api/drives/availability", params={"date": "2024-12-18", "company_id": acme.id},
                     headers=priya).json()
    assert own["is_locked"] is False

    days = client.get("/api/drives/calendar", params={"start": "2024-12-18", "end": "2024-12-20"},
                      headers=bajrang).json()
    assert [d["is_locked"] for d in days] == [True, False, False]
    assert [d["is_blocked"] for d in days] == [False, False, True]
    assert days[2]["reason"] == "Winter break"


def test_calendar_rejects_reversed_range(client, priya):
    response = client.get("/api/drives/calendar", params={"start": "2025-01-10", "end": "2025-01-01"}, headers=priya)
    assert response.status_code == 400


def test_no_date_request_row_when_lock_succeeds(client, db, priya, acme):
    lock(client, priya, acme, "2025-03-10", request_description="not needed")
    db.expire_all()
    assert db.scalar(select(func.count()).select_from(DateRequest)) == 0
