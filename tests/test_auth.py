from placecell.models import User
from placecell.services.account_service import AccountService
from tests.conftest import PASSWORD, auth_headers


def register(client, username="meera", display_name="Meera"):
    return client.post(
        "/api/auth/register",
        json={"username": username, "display_name": display_name, "password": PASSWORD},
    )


def login(client, username="meera"):
    return client.post("/api/auth/login", json={"username": username, "password": PASSWORD})


def test_registration_starts_pending(client):
    response = register(client)
    assert response.status_code == 201
    assert response.json()["status"] == "pending"
    assert response.json()["role"] == "coordinator"


def test_duplicate_username(client):
    register(client)
    assert register(client, username="MEERA").status_code == 409


def test_pending_user_can_login_but_not_act(client):
    register(client)
    token = login(client).json()
    assert token["status"] == "pending"
    headers = {"Authorization": f"Bearer {token['access_token']}"}

    assert client.get("/api/auth/me", headers=headers).status_code == 200
    refused = client.get("/api/companies", headers=headers)
    assert refused.status_code == 403
    assert "pending" in refused.json()["detail"]


def test_wrong_password(client):
    register(client)
    response = client.post("/api/auth/login", json={"username": "meera", "password": "not-the-password"})
    assert response.status_code == 401


def test_missing_token(client):
    assert client.get("/api/companies").status_code in (401, 403)


def test_admin_approval_grants_access(client, admin):
    user_id = register(client).json()["id"]

    pending = client.get("/api/admin/profiles", params={"status": "pending"}, headers=admin).json()
    assert [p["username"] for p in pending] == ["meera"]

    assert client.post(f"/api/admin/profiles/{user_id}/approve", headers=admin).json()["status"] == "approved"

    headers = {"Authorization": f"Bearer {login(client).json()['access_token']}"}
    assert client.get("/api/companies", headers=headers).status_code == 200


def test_rejected_user_stays_out(client, admin):
    user_id = register(client).json()["id"]
    client.post(f"/api/admin/profiles/{user_id}/reject", headers=admin)

    headers = {"Authorization": f"Bearer {login(client).json()['access_token']}"}
    assert client.get("/api/companies", headers=headers).status_code == 403


def test_profile_admin_is_admin_only(client, priya):
    assert client.get("/api/admin/profiles", headers=priya).status_code == 403


def test_admin_created_coordinator_is_approved(client, admin):
    response = client.post(
        "/api/admin/coordinators",
        json={"username": "ravi", "display_name": "Ravi", "password": PASSWORD, "phone": "98450 11111"},
        headers=admin,
    )
    assert response.status_code == 201
    assert response.json()["status"] == "approved"

    coordinators = client.get("/api/coordinators", headers=admin).json()
    assert "Ravi" in [c["display_name"] for c in coordinators]


def test_admin_seeded_once(db):
    service = AccountService(db)
    assert service.ensure_admin() is not None
    assert service.ensure_admin() is None
    assert db.query(User).filter(User.role == "admin").count() == 1


def test_token_for_deleted_user_is_rejected(client, db, priya_user):
    headers = auth_headers(priya_user)
    db.delete(priya_user)
    db.commit()
    assert client.get("/api/auth/me", headers=headers).status_code == 401


def test_display_name_taken_case_insensitively(client, priya_user):
    response = register(client, username="mallory", display_name=" priya ")
    assert response.status_code == 409
    assert response.json()["detail"] == "Display name already in use"


def test_admin_cannot_create_coordinator_with_taken_name(client, admin, priya_user):
    response = client.post(
        "/api/admin/coordinators",
        json={"username": "mallory", "display_name": "Priya", "password": PASSWORD},
        headers=admin,
    )
    assert response.status_code == 409


def test_namesake_cannot_unlock_another_coordinators_drive(client, db, priya, admin, acme):
    assert client.post("/api/drives", json={"company_id": acme.id, "drive_date": "2025-03-10"},
                       headers=priya).status_code == 201
    assert register(client, username="mallory", display_name="Priya").status_code == 409

    assert login(client, username="mallory").status_code == 401
    assert db.query(User).filter(User.username == "mallory").count() == 0
