"""Session rating business logic.

A rating submission touches four levels of aggregates:

1. the staff member who ran the session (running mean),
2. every rated item (running mean),
3. each service owning a rated item (rolled up from all its items),
4. each business owning one of those services (rolled up from all its services).

The session claim, every aggregate write and the stored payload share the
request transaction opened by ``get_db``. Any failure rolls all of it back,
so a session is either rated with every aggregate updated or still unrated
and safe to resubmit.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from pos_reviews.aggregation import RatingAggregate, apply_rating, rollup
from pos_reviews.exceptions import NotFoundError, SessionAlreadyRatedError, ValidationError
from pos_reviews.logging import get_logger
from pos_reviews.models import Business, Service
from pos_reviews.repositories.catalog import (
    get_business_for_update,
    get_item_for_update,
    get_service_for_update,
    get_staff_for_update,
    list_item_aggregates,
    list_service_aggregates,
)
from pos_reviews.repositories.session import claim_for_rating, get_session

logger = get_logger(__name__)


@dataclass(frozen=True)
class ItemRating:
    """One item rating inside a submission, addressed by its catalog path."""

    business_id: str
    service_id: str
    item_id: str
    rating: float

    def to_payload(self) -> dict[str, Any]:
        return {
            "businessId": self.business_id,
            "serviceId": self.service_id,
            "itemId": self.item_id,
            "rating": self.rating,
        }


@dataclass
class RatingResult:
    """Outcome of a successful submission."""

    session_id: str
    ratings: dict[str, Any]
    skipped_item_ratings: list[ItemRating] = field(default_factory=list)


def build_ratings_payload(
    staff_rating: float | None, comment: str | None, item_ratings: list[ItemRating]
) -> dict[str, Any]:
    """The payload stored on the session, in the same shape clients submit it."""
    return {
        "staffRating": staff_rating,
        "comment": comment,
        "itemRatings": [item.to_payload() for item in item_ratings],
    }


async def submit_session_rating(
    db: AsyncSession,
    session_id: str,
    *,
    staff_rating: float | None = None,
    comment: str | None = None,
    item_ratings: Iterable[ItemRating] = (),
) -> RatingResult:
    """Rate a session once and propagate the ratings through the hierarchy.

    Raises:
        ValidationError: neither a staff rating nor any item rating was given.
        NotFoundError: the session, or the staff member it belongs to, is missing.
        SessionAlreadyRatedError: the session has already been rated.
    """
    item_ratings = list(item_ratings)
    if staff_rating is None and not item_ratings:
        raise ValidationError("At least one rating is required")

    session = await get_session(db, session_id)
    if session is None:
        raise NotFoundError("Session", session_id)
    if session.rated:
        raise SessionAlreadyRatedError(session_id)

    payload = build_ratings_payload(staff_rating, comment, item_ratings)
    # The conditional write is the real guard; the check above only saves a round trip
    if not await claim_for_rating(db, session_id, payload, datetime.now(UTC)):
        raise SessionAlreadyRatedError(session_id)

    if staff_rating is not None:
        await _rate_staff(db, session.staff_id, staff_rating)

    touched, skipped = await _rate_items(db, item_ratings)

    for business_id, service_id in sorted(touched):
        await _rollup_service(db, business_id, service_id)
    for business_id in sorted({business_id for business_id, _ in touched}):
        await _rollup_business(db, business_id)

    await db.flush()
    await db.refresh(session)

    logger.info(
        "session_rated",
        session_id=session_id,
        staff_id=session.staff_id,
        staff_rated=staff_rating is not None,
        items_rated=len(item_ratings) - len(skipped),
        items_skipped=len(skipped),
        services_rolled_up=len(touched),
    )
    return RatingResult(session_id=session_id, ratings=payload, skipped_item_ratings=skipped)


async def recompute_service_rating(db: AsyncSession, business_id: str, service_id: str) -> Service:
    """Roll a service up from its items' current aggregates."""
    service = await _rollup_service(db, business_id, service_id)
    if service is None:
        raise NotFoundError("Service", service_id)
    await db.flush()
    return service


async def recompute_business_rating(db: AsyncSession, business_id: str) -> Business:
    """Roll a business up from its services' current aggregates."""
    business = await _rollup_business(db, business_id)
    if business is None:
        raise NotFoundError("Business", business_id)
    await db.flush()
    return business


async def _rate_staff(db: AsyncSession, staff_id: str, value: float) -> None:
    staff = await get_staff_for_update(db, staff_id)
    if staff is None:
        raise NotFoundError("Staff", staff_id)
    updated = apply_rating(RatingAggregate(staff.rating, staff.review_count), value)
    staff.rating, staff.review_count = updated.rating, updated.review_count


async def _rate_items(
    db: AsyncSession, item_ratings: list[ItemRating]
) -> tuple[set[tuple[str, str]], list[ItemRating]]:
    """Apply each item rating; return touched (business, service) pairs and skips.

    Rows are locked in path order so two submissions sharing items cannot deadlock.
    """
    touched: set[tuple[str, str]] = set()
    missing: set[ItemRating] = set()
    ordered = sorted(item_ratings, key=lambda r: (r.business_id, r.service_id, r.item_id))

    for entry in ordered:
        item = await get_item_for_update(db, entry.business_id, entry.service_id, entry.item_id)
        if item is None:
            logger.warning(
                "item_rating_skipped",
                business_id=entry.business_id,
                service_id=entry.service_id,
                item_id=entry.item_id,
            )
            missing.add(entry)
            continue

        updated = apply_rating(RatingAggregate(item.rating, item.review_count), entry.rating)
        item.rating, item.review_count = updated.rating, updated.review_count
        touched.add((entry.business_id, entry.service_id))

    skipped = [entry for entry in item_ratings if entry in missing]
    return touched, skipped


async def _rollup_service(db: AsyncSession, business_id: str, service_id: str) -> Service | None:
    # Lock the parent first: a concurrent submission re-reads the items only
    # after this transaction commits.
    service = await get_service_for_update(db, business_id, service_id)
    if service is None:
        logger.warning("service_rollup_skipped", business_id=business_id, service_id=service_id)
        return None

    aggregate = rollup(await list_item_aggregates(db, service_id))
    service.rating, service.review_count = aggregate.rating, aggregate.review_count
    logger.debug(
        "service_rollup",
        business_id=business_id,
        service_id=service_id,
        rating=aggregate.rating,
        review_count=aggregate.review_count,
    )
    return service


async def _rollup_business(db: AsyncSession, business_id: str) -> Business | None:
    business = await get_business_for_update(db, business_id)
    if business is None:
        logger.warning("business_rollup_skipped", business_id=business_id)
        return None

    aggregate = rollup(await list_service_aggregates(db, business_id))
    business.rating, business.review_count = aggregate.rating, aggregate.review_count
    logger.debug(
        "business_rollup",
        business_id=business_id,
        rating=aggregate.rating,
        review_count=aggregate.review_count,
    )
    return business
