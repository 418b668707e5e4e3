from typing import Callable, Dict, Tuple

import pytest
from fastapi.testclient import TestClient

from app.db.base import Base, SessionLocal, engine
from app.main import app
from app.models.user import UserRole
from app.schemas.user import UserCreate
from app.services.auth_service import AuthService

DEFAULT_PASSWORD = "secret123"


@pytest.fixture(autouse=True)
def fresh_database():
    """Every test starts from empty tables."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture()
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture()
def register(client: TestClient) -> Callable[..., Tuple[Dict[str, str], dict]]:
    """
    Register a user through the API and return ``(headers, user)``.

    ``headers`` carries the bearer token for the new account.
    """

    def _register(username: str = "alice", **overrides) -> Tuple[Dict[str, str], dict]:
        payload = {
            "email": f"{username}@example.com",
            "username": username,
            "password": DEFAULT_PASSWORD,
            "firstName": username.capitalize(),
            "lastName": "Tester",
        }
        payload.update(overrides)
        response = client.post("/api/auth/register", json=payload)
        assert response.status_code == 201, response.text
        data = response.json()
        return {"Authorization": f"Bearer {data['token']}"}, data["user"]

    return _register


@pytest.fixture()
def admin() -> Tuple[Dict[str, str], dict]:
    db = SessionLocal()
    try:
        user, token = AuthService(db).register(
            UserCreate(
                email="admin@example.com",
                username="admin",
                password=DEFAULT_PASSWORD,
                first_name="Admin",
                last_name="User",
            ),
            role=UserRole.ADMIN,
        )
        admin_user = {"id": user.id, "email": user.email}
    finally:
        db.close()
    return {"Authorization": f"Bearer {token}"}, admin_user


@pytest.fixture()
def make_project(client: TestClient) -> Callable[..., dict]:
    def _make_project(headers: Dict[str, str], name: str = "Website", **fields) -> dict:
        payload = {"name": name, "description": f"{name} project"}
        payload.update(fields)
        response = client.post("/api/projects", json=payload, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["project"]

    return _make_project


@pytest.fixture()
def make_task(client: TestClient) -> Callable[..., dict]:
    def _make_task(headers: Dict[str, str], project_id: str, title: str = "Write docs", **fields) -> dict:
        payload = {"title": title, "description": f"{title} description", "projectId": project_id}
        payload.update(fields)
        response = client.post("/api/tasks", json=payload, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["task"]

    return _make_task
