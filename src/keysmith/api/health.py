"""
keysmith/api/health.py — Health check.

GET /api/v1/health — режим хранилища и доступность PostgreSQL.
"""

from fastapi import APIRouter, Request

from keysmith.database import check_connection

router = APIRouter(tags=["health"])


@router.get("/health", summary="Health check Keysmith")
async def health(request: Request):
    storage = getattr(request.app.state, "storage_mode", "memory")
    if storage == "memory":
        return {"status": "healthy", "database": "memory", "service": "keysmith"}
    db_ok = await check_connection()
    return {
        "status": "healthy" if db_ok else "degraded",
        "database": "connected" if db_ok else "disconnected",
        "service": "keysmith",
    }
