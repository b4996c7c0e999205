import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pourfoliolic.database import get_db
from pourfoliolic.dependencies import get_current_user
from pourfoliolic.models.user import User
from pourfoliolic.schemas.drink import DrinkCreate, DrinkResponse, DrinkType, DrinkUpdate
from pourfoliolic.services import drink_service
from pourfoliolic.services.drink_service import DrinkFilters

router = APIRouter(prefix="/api/drinks", tags=["drinks"])


def drink_filters(
    type: DrinkType | None = None,
    subtype: str | None = None,
    min_rating: float | None = Query(default=None, ge=0, le=5),
    max_rating: float | None = Query(default=None, ge=0, le=5),
    min_price: float | None = Query(default=None, ge=0),
    max_price: float | None = Query(default=None, ge=0),
    maker: str | None = None,
    search: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> DrinkFilters:
    """Query-string filters shared by the journal and the community feed."""
    return DrinkFilters(
        type=type,
        subtype=subtype,
        min_rating=min_rating,
        max_rating=max_rating,
        min_price=min_price,
        max_price=max_price,
        maker=maker,
        search_query=search,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("", response_model=list[DrinkResponse])
async def list_drinks(
    filters: DrinkFilters = Depends(drink_filters),
    sort_by: str = Query(default="date", pattern="^(date|rating|name|price)$"),
    sort_order: str = Query(default="desc", pattern="^(asc|desc)$"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    filters.user_id = user.id
    return await drink_service.get_drinks(db, filters, sort_by, sort_order)


@router.post("", response_model=DrinkResponse, status_code=201)
async def create_drink(
    data: DrinkCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await drink_service.create_drink(db, user.id, data.model_dump())


@router.get("/{drink_id}", response_model=DrinkResponse)
async def get_drink(
    drink_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await drink_service.get_visible_drink(db, drink_id, user.id)


@router.put("/{drink_id}", response_model=DrinkResponse)
@router.patch("/{drink_id}", response_model=DrinkResponse)
async def update_drink(
    drink_id: uuid.UUID,
    data: DrinkUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await drink_service.update_drink(
        db, user.id, drink_id, data.model_dump(exclude_unset=True)
    )


@router.delete("/{drink_id}", status_code=204)
async def delete_drink(
    drink_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await drink_service.delete_drink(db, user.id, drink_id)
