"""Session data-access layer."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from pos_reviews.models import StaffSession


async def create_session(
    db: AsyncSession, staff_id: str, items: list[dict[str, Any]], total_amount: Decimal
) -> StaffSession:
    session = StaffSession(staff_id=staff_id, items=items, total_amount=total_amount)
    db.add(session)
    await db.flush()
    # Pull server-side defaults (created_at) so the instance serializes without lazy I/O
    await db.refresh(session)
    return session


async def get_session(db: AsyncSession, session_id: str) -> StaffSession | None:
    result = await db.execute(select(StaffSession).where(StaffSession.id == session_id))
    return result.scalar_one_or_none()


async def list_sessions_for_staff(
    db: AsyncSession, staff_id: str, skip: int, limit: int
) -> list[StaffSession]:
    """Return a page of a staff member's sessions, newest first."""
    stmt = (
        select(StaffSession)
        .where(StaffSession.staff_id == staff_id)
        .order_by(StaffSession.created_at.desc(), StaffSession.id)
        .offset(skip)
        .limit(limit)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def count_sessions_for_staff(db: AsyncSession, staff_id: str) -> int:
    stmt = select(func.count(StaffSession.id)).where(StaffSession.staff_id == staff_id)
    result = await db.execute(stmt)
    return result.scalar_one()


async def claim_for_rating(
    db: AsyncSession, session_id: str, ratings: dict[str, Any], rated_at: datetime
) -> bool:
    """Flip ``rated`` from false to true and store the payload in one statement.

    Conditional on ``rated`` still being false, so of two concurrent submissions
    exactly one sees a matched row. Returns whether this call won the claim.
    """
    stmt = (
        update(StaffSession)
        .where(StaffSession.id == session_id, StaffSession.rated.is_(False))
        .values(rated=True, ratings=ratings, rated_at=rated_at)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    return result.rowcount == 1  # type: ignore[attr-defined]


async def list_rated_sessions(
    db: AsyncSession, staff_ids: list[str] | None = None
) -> list[StaffSession]:
    """Return rated sessions, most recently rated first, optionally for some staff only."""
    stmt = (
        select(StaffSession)
        .where(StaffSession.rated.is_(True))
        .order_by(StaffSession.rated_at.desc(), StaffSession.id)
    )
    if staff_ids is not None:
        stmt = stmt.where(StaffSession.staff_id.in_(staff_ids))
    result = await db.execute(stmt)
    return list(result.scalars().all())
