"""Admin endpoints that rebuild a parent's rating from its children.

Used to repair aggregates after catalog edits made outside the rating flow.
"""

from fastapi import APIRouter

from pos_reviews.dependencies import DB
from pos_reviews.schemas.analytics import BusinessRanking, ServiceRanking
from pos_reviews.services.rating import recompute_business_rating, recompute_service_rating

router = APIRouter(prefix="/businesses", tags=["rollup"])


@router.post("/{business_id}/services/{service_id}/rollup", response_model=ServiceRanking)
async def rollup_service(db: DB, business_id: str, service_id: str) -> ServiceRanking:
    service = await recompute_service_rating(db, business_id, service_id)
    return ServiceRanking.model_validate(service)


@router.post("/{business_id}/rollup", response_model=BusinessRanking)
async def rollup_business(db: DB, business_id: str) -> BusinessRanking:
    business = await recompute_business_rating(db, business_id)
    return BusinessRanking.model_validate(business)
