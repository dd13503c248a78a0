from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import user_repo
from app.main import app
from app.repos.user_repo import InMemoryUserRepo

# Ensure repo root is on sys.path so `import app` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def reset_user_store() -> None:
    """Start every test from an empty in-memory store with ids from 1."""
    user_repo.clear()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def repo() -> InMemoryUserRepo:
    return InMemoryUserRepo()


def create_test_user(
    client: TestClient,
    email: str = "a@x.com",
    first_name: str = "A",
    last_name: str = "B",
    **extra: object,
) -> dict:
    """POST a user and return the response body; fails the test on non-201."""
    resp = client.post(
        "/api/users",
        json={"email": email, "firstName": first_name, "lastName": last_name, **extra},
    )
    assert resp.status_code == 201, resp.text
    return resp.json()
