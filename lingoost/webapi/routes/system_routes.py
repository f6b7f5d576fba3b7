"""System-level endpoints."""

from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/health")
def healthcheck() -> dict[str, str]:
    """Simple healthcheck endpoint for smoke-testing the server."""

    return {"status": "ok"}


__all__ = ["router"]
