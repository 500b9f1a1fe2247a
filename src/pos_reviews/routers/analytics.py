"""Rating leaderboard and staff performance endpoints."""

from typing import Annotated, Any, TypeVar

from fastapi import APIRouter, Query

from pos_reviews.config import settings
from pos_reviews.dependencies import DB
from pos_reviews.schemas.analytics import (
    BusinessLeaderboard,
    BusinessRanking,
    ItemLeaderboard,
    ItemRanking,
    RatedEntity,
    Review,
    ServiceLeaderboard,
    ServiceRanking,
    StaffLeaderboard,
    StaffPerformance,
    StaffRanking,
)
from pos_reviews.services import analytics

router = APIRouter(prefix="/analytics", tags=["analytics"])
staff_router = APIRouter(tags=["analytics"])

Limit = Annotated[int, Query(ge=1, le=100)]
BusinessFilter = Annotated[str | None, Query(alias="businessId")]

R = TypeVar("R", bound=RatedEntity)


def _ranking(schema: type[R], entry: analytics.Ranked[Any]) -> R:
    ranking = schema.model_validate(entry.entity)
    return ranking.model_copy(
        update={"reviews": [Review.model_validate(review) for review in entry.reviews]}
    )


@router.get("/staff", response_model=StaffLeaderboard)
async def top_staff(
    db: DB, limit: Limit = settings.leaderboard_limit, business_id: BusinessFilter = None
) -> StaffLeaderboard:
    staff = await analytics.get_top_staff(db, limit, business_id)
    return StaffLeaderboard(top_staff=[_ranking(StaffRanking, s) for s in staff])


@router.get("/businesses", response_model=BusinessLeaderboard)
async def top_businesses(db: DB, limit: Limit = settings.leaderboard_limit) -> BusinessLeaderboard:
    businesses = await analytics.get_top_businesses(db, limit)
    return BusinessLeaderboard(top_businesses=[_ranking(BusinessRanking, b) for b in businesses])


@router.get("/services", response_model=ServiceLeaderboard)
async def top_services(
    db: DB, limit: Limit = settings.leaderboard_limit, business_id: BusinessFilter = None
) -> ServiceLeaderboard:
    services = await analytics.get_top_services(db, limit, business_id)
    return ServiceLeaderboard(top_services=[_ranking(ServiceRanking, s) for s in services])


@router.get("/items", response_model=ItemLeaderboard)
async def top_items(
    db: DB, limit: Limit = settings.leaderboard_limit, business_id: BusinessFilter = None
) -> ItemLeaderboard:
    items = await analytics.get_top_items(db, limit, business_id)
    return ItemLeaderboard(top_items=[_ranking(ItemRanking, i) for i in items])


@staff_router.get("/staff/{staff_id}/performance", response_model=StaffPerformance)
async def staff_performance(db: DB, staff_id: str) -> StaffPerformance:
    performance = await analytics.get_staff_performance(db, staff_id)
    return StaffPerformance.model_validate(performance)
