import asyncio

import pytest
from fastapi.testclient import TestClient

from auth import repository, security
from core.memory_store import MemoryStore
from core.notify import NotifyError
from core.resources import ALL_SCHEMAS
from main import create_app

DEFAULT_PASSWORD = "secret123"


class RecordingNotifier:
    def __init__(self) -> None:
        self.sent: list[dict] = []
        self.fail = False

    async def send(self, *, to: str, subject: str, body: str) -> None:
        if self.fail:
            raise NotifyError("delivery refused")
        self.sent.append({"to": to, "subject": subject, "body": body})


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore(ALL_SCHEMAS)


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def client(store, notifier) -> TestClient:
    return TestClient(create_app(store=store, notifier=notifier))


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def register(client: TestClient, email: str, *, role: str = "user", name: str | None = None) -> str:
    res = client.post(
        "/api/v1/auth/register",
        json={"name": name or email.split("@")[0], "email": email, "password": DEFAULT_PASSWORD, "role": role},
    )
    assert res.status_code == 201, res.text
    return res.json()["token"]


@pytest.fixture()
def admin_token(client, store) -> str:
    # Admins cannot self-register; seed one directly.
    asyncio.run(
        repository.create_user(
            store,
            name="Admin",
            email="admin@example.com",
            password_hash=security.hash_password(DEFAULT_PASSWORD),
            role="admin",
        )
    )
    res = client.post("/api/v1/auth/login", json={"email": "admin@example.com", "password": DEFAULT_PASSWORD})
    assert res.status_code == 200, res.text
    return res.json()["token"]


@pytest.fixture()
def publisher_token(client) -> str:
    return register(client, "publisher@example.com", role="publisher")


@pytest.fixture()
def user_token(client) -> str:
    return register(client, "user@example.com")
