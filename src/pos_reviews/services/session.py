"""Session lifecycle business logic: creation, lookup and admin verification.

Rating submission lives in services/rating.py.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from pos_reviews.exceptions import NotFoundError
from pos_reviews.logging import get_logger
from pos_reviews.models import StaffSession
from pos_reviews.repositories import session as session_repo
from pos_reviews.repositories.catalog import get_staff
from pos_reviews.schemas.pagination import Paginated

logger = get_logger(__name__)


async def create_session(
    db: AsyncSession, staff_id: str, items: list[dict[str, Any]], total_amount: Decimal
) -> StaffSession:
    """Open a new, unrated and unverified session for a staff member."""
    if await get_staff(db, staff_id) is None:
        raise NotFoundError("Staff", staff_id)

    session = await session_repo.create_session(db, staff_id, items, total_amount)
    logger.info("session_created", session_id=session.id, staff_id=staff_id, items=len(items))
    return session


async def get_session(db: AsyncSession, session_id: str) -> StaffSession:
    session = await session_repo.get_session(db, session_id)
    if session is None:
        raise NotFoundError("Session", session_id)
    return session


async def list_staff_sessions(
    db: AsyncSession, staff_id: str, skip: int, limit: int
) -> Paginated[StaffSession]:
    if await get_staff(db, staff_id) is None:
        raise NotFoundError("Staff", staff_id)

    items = await session_repo.list_sessions_for_staff(db, staff_id, skip, limit)
    total = await session_repo.count_sessions_for_staff(db, staff_id)
    return Paginated(items=items, total=total, skip=skip, limit=limit)


async def verify_session_rating(db: AsyncSession, session_id: str) -> StaffSession:
    """Mark a session as verified by an admin.

    Only ever moves verified from false to true and has no effect on rating
    aggregates. Repeating the call keeps the original verified_at.
    """
    session = await get_session(db, session_id)
    if not session.verified:
        session.verified = True
        session.verified_at = datetime.now(UTC)
        await db.flush()
        logger.info("session_verified", session_id=session_id, rated=session.rated)
    return session
