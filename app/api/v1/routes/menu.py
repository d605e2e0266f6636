# app/api/v1/routes/menu.py
"""Public menu for the table-ordering page."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.envelope import ok
from app.core.db import get_db
from app.domain.services.menu_service import public_menu

router = APIRouter(prefix="/menu", tags=["Menu"])


@router.get("", response_model=dict)
async def get_menu(db: AsyncSession = Depends(get_db)):
    """Active categories, each with its available items and add-ons."""
    return ok(data=await public_menu(db))
