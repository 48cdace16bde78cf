import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from techphone.core import admin_emails
from techphone.db.session import get_db, init_db
from techphone.main import app
from techphone.models.orm import Product
from techphone.services.realtime import reset_counters

ADMIN_EMAIL = "admin@techphone.com"
PASSWORD = "secret123"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def _isolated_state():
    saved = list(admin_emails.ADMIN_EMAILS)
    admin_emails.ADMIN_EMAILS[:] = [ADMIN_EMAIL]
    reset_counters()
    yield
    admin_emails.ADMIN_EMAILS[:] = saved
    reset_counters()


def register(client, email, password=PASSWORD, full_name=None):
    resp = client.post("/api/auth/signup", json={"email": email, "password": password, "full_name": full_name})
    assert resp.status_code == 201, resp.text
    login = client.post("/api/auth/login", json={"email": email, "password": password})
    assert login.status_code == 200, login.text
    body = login.json()
    return {
        "id": body["profile"]["id"],
        "email": email,
        "headers": {"Authorization": f"Bearer {body['access_token']}"},
    }


@pytest.fixture
def admin(client):
    return register(client, ADMIN_EMAIL, full_name="Quản trị viên")


@pytest.fixture
def customer(client):
    return register(client, "khach@example.com", full_name="Nguyễn Văn A")


@pytest.fixture
def other_customer(client):
    return register(client, "khach2@example.com", full_name="Trần Thị B")


def add_product(db, **fields):
    data = {"name": "Sản phẩm", "price": 1000000, "category": "phone", "brand": "Apple", "condition": "new"}
    data.update(fields)
    product = Product(**data)
    db.add(product)
    db.commit()
    db.refresh(product)
    return product
