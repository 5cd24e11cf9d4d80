# app/api/routes/admin.py
"""Статистика магазина для админки."""

from fastapi import APIRouter, Depends

from app.api.dependencies import get_storage, ok
from infrastructure.storage.base import Storage

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/stats")
async def get_stats(storage: Storage = Depends(get_storage)):
    stats = await storage.get_stats()
    return ok(stats.to_json())
