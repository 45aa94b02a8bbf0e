from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.errors import InvalidInputError
from backoffice.database import get_db
from backoffice.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats")
async def dashboard_stats(
    start: Optional[date] = None,
    end: Optional[date] = None,
    db: AsyncSession = Depends(get_db),
):
    if start and end and end < start:
        raise InvalidInputError("end must not be before start")
    return {"success": True, "data": await DashboardService.stats(db, start, end)}
