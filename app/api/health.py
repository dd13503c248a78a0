"""Liveness probe.

/health answers "is this process alive?" and nothing more. A dead
database shows up as 500s on the users API, not as a failed liveness check.
"""

from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
