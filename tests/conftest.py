import os

os.environ["ENV"] = "test"
os.environ["RAZORPAY_KEY_ID"] = ""
os.environ["RAZORPAY_KEY_SECRET"] = ""
os.environ["RAZORPAY_WEBHOOK_SECRET"] = ""

import json

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.database import get_session
from app.main import app
from app.models import Course, Service, User
from app.routes.purchases import get_webhook_secret
from app.services.payment_gateway import MockGateway, get_payment_gateway
from app.utils.signature import compute_signature
from app.utils.token import create_access_token

TEST_KEY_SECRET = "rzp_test_secret"
TEST_WEBHOOK_SECRET = "whsec_test_secret"


@pytest.fixture(name="session")
def session_fixture():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="gateway")
def gateway_fixture():
    return MockGateway(TEST_KEY_SECRET)


@pytest.fixture(name="webhook_secret")
def webhook_secret_fixture():
    return TEST_WEBHOOK_SECRET


@pytest.fixture(name="client")
def client_fixture(session, gateway, webhook_secret):
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_webhook_secret] = lambda: webhook_secret

    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="make_user")
def make_user_fixture(session):
    counter = {"n": 0}

    def _make_user(**overrides):
        counter["n"] += 1
        data = {
            "first_name": "Asha",
            "last_name": "Rao",
            "email": f"user{counter['n']}@example.com",
        }
        data.update(overrides)
        user = User(**data)
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make_user


@pytest.fixture(name="user")
def user_fixture(make_user):
    return make_user()


@pytest.fixture(name="auth_headers")
def auth_headers_fixture():
    def _headers(user):
        token = create_access_token({"user_id": user.id})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture(name="make_service")
def make_service_fixture(session):
    def _make_service(**overrides):
        data = {
            "name": "Career Mentoring",
            "slug": "career-mentoring",
            "description": "One hour mentoring call",
            "price": 99.99,
        }
        data.update(overrides)
        service = Service(**data)
        session.add(service)
        session.commit()
        session.refresh(service)
        return service

    return _make_service


@pytest.fixture(name="make_course")
def make_course_fixture(session):
    def _make_course(**overrides):
        data = {
            "title": "Data Structures in Depth",
            "slug": "data-structures",
            "description": "Twelve week course",
            "price": 499.0,
            "is_premium": True,
        }
        data.update(overrides)
        course = Course(**data)
        session.add(course)
        session.commit()
        session.refresh(course)
        return course

    return _make_course


@pytest.fixture(name="checkout")
def checkout_fixture(client, auth_headers):
    """Run a checkout through the API and return its JSON body."""

    def _checkout(user, **body):
        response = client.post(
            "/purchases/checkout", json=body, headers=auth_headers(user)
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _checkout


@pytest.fixture(name="send_webhook")
def send_webhook_fixture(client, webhook_secret):
    def _send(event, signature=None, secret=None):
        body = json.dumps(event).encode()
        if signature is None:
            signature = compute_signature(secret or webhook_secret, body)
        return client.post(
            "/purchases/webhook",
            content=body,
            headers={
                "Content-Type": "application/json",
                "X-Razorpay-Signature": signature,
            },
        )

    return _send
