"""Rating leaderboards and staff performance.

Reads the stored aggregates; nothing is recomputed here. Each leaderboard
entry carries the reviews behind it, collected from rated sessions: staff
entries get the session's staff rating, catalog entries get every item rating
whose path falls under them. Comments are attached to both.
"""

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from pos_reviews.exceptions import NotFoundError
from pos_reviews.models import Business, Item, Service, Staff, StaffSession
from pos_reviews.repositories import catalog
from pos_reviews.repositories.session import list_rated_sessions

# (business_id,), (business_id, service_id) or (business_id, service_id, item_id)
CatalogPath = tuple[str, ...]

T = TypeVar("T")


@dataclass
class Review:
    comment: str | None
    rating: float | None
    rated_at: datetime | None


@dataclass
class Ranked(Generic[T]):
    """A leaderboard entity together with the reviews that rated it."""

    entity: T
    reviews: list[Review] = field(default_factory=list)


@dataclass
class StaffPerformance:
    staff_id: str
    name: str
    rating: float
    total_reviews: int


def _staff_reviews(sessions: Iterable[StaffSession]) -> dict[str, list[Review]]:
    reviews: dict[str, list[Review]] = defaultdict(list)
    for session in sessions:
        ratings = session.ratings or {}
        reviews[session.staff_id].append(
            Review(
                comment=ratings.get("comment"),
                rating=ratings.get("staffRating"),
                rated_at=session.rated_at,
            )
        )
    return reviews


def _catalog_reviews(
    sessions: Iterable[StaffSession], depth: int
) -> dict[CatalogPath, list[Review]]:
    """Group item ratings by the first ``depth`` segments of their catalog path."""
    reviews: dict[CatalogPath, list[Review]] = defaultdict(list)
    for session in sessions:
        ratings = session.ratings or {}
        for entry in ratings.get("itemRatings") or []:
            path = (entry["businessId"], entry["serviceId"], entry["itemId"])[:depth]
            reviews[path].append(
                Review(
                    comment=ratings.get("comment"),
                    rating=entry["rating"],
                    rated_at=session.rated_at,
                )
            )
    return reviews


async def get_top_staff(
    db: AsyncSession, limit: int, business_id: str | None = None
) -> list[Ranked[Staff]]:
    staff = await catalog.top_staff(db, limit, business_id)
    if not staff:
        return []
    reviews = _staff_reviews(await list_rated_sessions(db, [member.id for member in staff]))
    return [Ranked(entity=member, reviews=reviews.get(member.id, [])) for member in staff]


async def get_top_businesses(db: AsyncSession, limit: int) -> list[Ranked[Business]]:
    businesses = await catalog.top_businesses(db, limit)
    reviews = _catalog_reviews(await list_rated_sessions(db), depth=1)
    return [Ranked(entity=b, reviews=reviews.get((b.id,), [])) for b in businesses]


async def get_top_services(
    db: AsyncSession, limit: int, business_id: str | None = None
) -> list[Ranked[Service]]:
    services = await catalog.top_services(db, limit, business_id)
    reviews = _catalog_reviews(await list_rated_sessions(db), depth=2)
    return [Ranked(entity=s, reviews=reviews.get((s.business_id, s.id), [])) for s in services]


async def get_top_items(
    db: AsyncSession, limit: int, business_id: str | None = None
) -> list[Ranked[Item]]:
    items = await catalog.top_items(db, limit, business_id)
    reviews = _catalog_reviews(await list_rated_sessions(db), depth=3)
    return [
        Ranked(entity=i, reviews=reviews.get((i.business_id, i.service_id, i.id), []))
        for i in items
    ]


async def get_staff_performance(db: AsyncSession, staff_id: str) -> StaffPerformance:
    staff = await catalog.get_staff(db, staff_id)
    if staff is None:
        raise NotFoundError("Staff", staff_id)
    return StaffPerformance(
        staff_id=staff.id,
        name=staff.name,
        rating=staff.rating,
        total_reviews=staff.review_count,
    )
