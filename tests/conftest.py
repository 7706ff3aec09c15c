import os

# Must be set before placecell is imported: the engine is built at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["SMTP_USER"] = ""
os.environ["SMTP_PASSWORD"] = ""

from datetime import date  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from placecell.core.auth import Actor, create_access_token, hash_password  # noqa: E402
from placecell.db.postgres import Base, SessionLocal, engine  # noqa: E402
from placecell.main import app  # noqa: E402
from placecell.models import Company, User  # noqa: E402

PASSWORD = "password123"


@pytest.fixture(autouse=True)
def tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(db, username, display_name, role="coordinator", status="approved"):
    user = User(
        username=username,
        password_hash=hash_password(PASSWORD),
        display_name=display_name,
        role=role,
        status=status,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user):
    token = create_access_token({"sub": str(user.id), "role": user.role})
    return {"Authorization": f"Bearer {token}"}


def make_company(db, name, poc_1st="Priya", **fields):
    company = Company(name=name, poc_1st=poc_1st, **fields)
    db.add(company)
    db.commit()
    db.refresh(company)
    return company


@pytest.fixture
def admin_user(db):
    return make_user(db, "admin", "Placement Admin", role="admin")


@pytest.fixture
def priya_user(db):
    return make_user(db, "priya", "Priya")


@pytest.fixture
def bajrang_user(db):
    return make_user(db, "bajrang", "Bajrang")


@pytest.fixture
def admin(admin_user):
    return auth_headers(admin_user)


@pytest.fixture
def priya(priya_user):
    return auth_headers(priya_user)


@pytest.fixture
def bajrang(bajrang_user):
    return auth_headers(bajrang_user)


@pytest.fixture
def priya_actor(priya_user):
    return Actor.from_user(priya_user)


@pytest.fixture
def admin_actor(admin_user):
    return Actor.from_user(admin_user)


@pytest.fixture
def acme(db):
    return make_company(db, "Acme", hr_name="Asha Rao", hr_email="hr@acme.com")


@pytest.fixture
def globex(db):
    return make_company(db, "Globex", poc_1st="Bajrang")


@pytest.fixture
def winter_break(db, admin_user):
    from placecell.models import BlockedDate

    blocked = BlockedDate(
        start_date=date(2024, 12, 20),
        end_date=date(2025, 1, 5),
        reason="Winter break",
        created_by=admin_user.display_name,
    )
    db.add(blocked)
    db.commit()
    db.refresh(blocked)
    return blocked
