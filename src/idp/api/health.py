"""
idp/api/health.py — Health check эндпоинт.

GET /api/v1/health — проверяет доступность PostgreSQL.
"""

from fastapi import APIRouter

from idp.database import check_connection

router = APIRouter(tags=["health"])


@router.get("/health", summary="Health check IdP-сервиса")
async def health():
    """Проверяет доступность БД."""
    db_ok = await check_connection()
    return {
        "status": "healthy" if db_ok else "degraded",
        "database": "connected" if db_ok else "disconnected",
        "service": "idp",
    }
