"""Leaderboard, performance and rollup response schemas."""

from datetime import datetime

from pydantic import Field

from pos_reviews.schemas.base import CamelModel


class Review(CamelModel):
    comment: str | None = None
    rating: float | None = None
    rated_at: datetime | None = None


class RatedEntity(CamelModel):
    id: str
    name: str
    rating: float
    review_count: int
    reviews: list[Review] = Field(default_factory=list)


class StaffRanking(RatedEntity):
    business_id: str


class BusinessRanking(RatedEntity):
    pass


class ServiceRanking(RatedEntity):
    business_id: str


class ItemRanking(RatedEntity):
    business_id: str
    service_id: str
    category: str


class StaffLeaderboard(CamelModel):
    top_staff: list[StaffRanking]


class BusinessLeaderboard(CamelModel):
    top_businesses: list[BusinessRanking]


class ServiceLeaderboard(CamelModel):
    top_services: list[ServiceRanking]


class ItemLeaderboard(CamelModel):
    top_items: list[ItemRanking]


class StaffPerformance(CamelModel):
    staff_id: str
    name: str
    rating: float
    total_reviews: int
