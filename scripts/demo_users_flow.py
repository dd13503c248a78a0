"""Demo: walk the /api/users lifecycle using FastAPI TestClient.

Run with:
    python scripts/demo_users_flow.py
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from app.main import app

DEMO_EMAIL = "demo@example.com"


def main() -> None:
    client = TestClient(app)

    # ── Step 1: POST /api/users ─────────────────────────────────────
    r = client.post(
        "/api/users",
        json={
            "email": DEMO_EMAIL,
            "firstName": "Demo",
            "lastName": "User",
            "password": "demo-pass",
        },
    )
    print(f"1. POST   /api/users            → {r.status_code}  {r.json()}")
    user_id = r.json()["id"]

    # ── Step 2: POST duplicate email ────────────────────────────────
    r = client.post(
        "/api/users",
        json={"email": DEMO_EMAIL, "firstName": "Again", "lastName": "User"},
    )
    print(f"2. POST   /api/users (dupe)     → {r.status_code}  {r.json()}")

    # ── Step 3: PUT partial update ──────────────────────────────────
    r = client.put(f"/api/users/{user_id}", json={"firstName": "Renamed"})
    print(f"3. PUT    /api/users/{user_id}        → {r.status_code}  {r.json()}")

    # ── Step 4: GET list ────────────────────────────────────────────
    r = client.get("/api/users")
    print(f"4. GET    /api/users            → {r.status_code}  {len(r.json())} user(s)")

    # ── Step 5: DELETE twice ────────────────────────────────────────
    r = client.delete(f"/api/users/{user_id}")
    print(f"5. DELETE /api/users/{user_id}        → {r.status_code}  (soft-deleted)")
    r = client.delete(f"/api/users/{user_id}")
    print(f"6. DELETE /api/users/{user_id}        → {r.status_code}  {r.json()}")

    # ── Step 6: GET deleted user ────────────────────────────────────
    r = client.get(f"/api/users/{user_id}")
    print(f"7. GET    /api/users/{user_id}        → {r.status_code}  {r.json()}")


if __name__ == "__main__":
    main()
