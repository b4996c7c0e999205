from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pourfoliolic.database import get_db
from pourfoliolic.dependencies import get_current_user
from pourfoliolic.models.user import User
from pourfoliolic.schemas.drink import DrinkResponse
from pourfoliolic.schemas.stats import DrinkStatsResponse
from pourfoliolic.services import stats_service

router = APIRouter(prefix="/api", tags=["stats"])


@router.get("/stats", response_model=DrinkStatsResponse)
async def get_stats(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await stats_service.get_drink_stats(db, user.id)


@router.get("/recommendations", response_model=list[DrinkResponse])
async def get_recommendations(
    limit: int = Query(default=5, ge=1, le=20),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await stats_service.get_recommendations(db, user.id, limit=limit)
