from datetime import date, datetime, timedelta

from placecell.models import CampusDrive, DateRequest, Task
from placecell.services.dashboard_service import DashboardService


def test_summary_counts(client, db, priya, bajrang, acme, globex):
    today = datetime.utcnow().date()
    db.add_all([
        CampusDrive(company_id=acme.id, coordinator_name="Priya", drive_date=today + timedelta(days=7)),
        CampusDrive(company_id=globex.id, coordinator_name="Bajrang", drive_date=today - timedelta(days=7)),
        DateRequest(coordinator_name="Priya", requested_date=today, description="Only slot"),
        Task(coordinator_name="Priya", title="Overdue", due_date=datetime.utcnow() - timedelta(days=1)),
        Task(coordinator_name="Priya", title="Later", due_date=datetime.utcnow() + timedelta(days=3)),
        Task(coordinator_name="Priya", title="Done", status="completed",
             due_date=datetime.utcnow() - timedelta(days=2)),
        Task(coordinator_name="Bajrang", title="Not mine", due_date=datetime.utcnow() - timedelta(days=1)),
    ])
    db.commit()
    client.post(f"/api/companies/{globex.id}/blacklist", json={"reason": "No show"}, headers=priya)

    summary = client.get("/api/dashboard/summary", headers=priya).json()

    assert summary == {
        "total_companies": 2,
        "active_companies": 1,
        "blacklisted_companies": 1,
        "registrations_submitted": 0,
        "upcoming_drives": 1,
        "pending_date_requests": 1,
        "open_tasks": 2,
        "overdue_tasks": 1,
    }


def test_upcoming_counts_from_utc_day_of_now(db, acme, globex, priya_actor):
    db.add_all([
        CampusDrive(company_id=acme.id, coordinator_name="Priya", drive_date=date(2025, 3, 10)),
        CampusDrive(company_id=globex.id, coordinator_name="Bajrang", drive_date=date(2025, 3, 9)),
    ])
    db.commit()

    late_evening = datetime(2025, 3, 9, 23, 30)
    assert DashboardService(db).summary(priya_actor, now=late_evening).upcoming_drives == 2
    assert DashboardService(db).summary(priya_actor, now=late_evening + timedelta(hours=1)).upcoming_drives == 1
