"""Catalog and staff data-access layer.

Pure query functions, no business logic. The ``*_for_update`` lookups take a
row lock (SELECT ... FOR UPDATE) so a read-modify-write of the aggregate
fields cannot interleave with another transaction's. Backends without row
locks (SQLite) silently drop the clause.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pos_reviews.aggregation import RatingAggregate
from pos_reviews.models import Business, Item, Service, Staff


async def get_staff(db: AsyncSession, staff_id: str) -> Staff | None:
    return await db.get(Staff, staff_id)


async def get_staff_for_update(db: AsyncSession, staff_id: str) -> Staff | None:
    stmt = select(Staff).where(Staff.id == staff_id).with_for_update()
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_item_for_update(
    db: AsyncSession, business_id: str, service_id: str, item_id: str
) -> Item | None:
    """Resolve an item by its full (business, service, item) path.

    An item id under the wrong service or business counts as missing.
    """
    stmt = (
        select(Item)
        .where(
            Item.id == item_id,
            Item.service_id == service_id,
            Item.business_id == business_id,
        )
        .with_for_update()
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_service_for_update(
    db: AsyncSession, business_id: str, service_id: str
) -> Service | None:
    stmt = (
        select(Service)
        .where(Service.id == service_id, Service.business_id == business_id)
        .with_for_update()
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_business_for_update(db: AsyncSession, business_id: str) -> Business | None:
    stmt = select(Business).where(Business.id == business_id).with_for_update()
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def list_item_aggregates(db: AsyncSession, service_id: str) -> list[RatingAggregate]:
    """Return (rating, review_count) of every item under a service."""
    stmt = select(Item.rating, Item.review_count).where(Item.service_id == service_id)
    result = await db.execute(stmt)
    return [RatingAggregate(rating=row[0], review_count=row[1]) for row in result.all()]


async def list_service_aggregates(db: AsyncSession, business_id: str) -> list[RatingAggregate]:
    """Return (rating, review_count) of every service under a business."""
    stmt = select(Service.rating, Service.review_count).where(Service.business_id == business_id)
    result = await db.execute(stmt)
    return [RatingAggregate(rating=row[0], review_count=row[1]) for row in result.all()]


async def top_staff(db: AsyncSession, limit: int, business_id: str | None = None) -> list[Staff]:
    """Staff ordered by rating, ties broken by review count."""
    stmt = select(Staff).order_by(Staff.rating.desc(), Staff.review_count.desc(), Staff.name)
    if business_id is not None:
        stmt = stmt.where(Staff.business_id == business_id)
    result = await db.execute(stmt.limit(limit))
    return list(result.scalars().all())


async def top_businesses(db: AsyncSession, limit: int) -> list[Business]:
    stmt = (
        select(Business)
        .order_by(Business.rating.desc(), Business.review_count.desc(), Business.name)
        .limit(limit)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def top_services(
    db: AsyncSession, limit: int, business_id: str | None = None
) -> list[Service]:
    stmt = select(Service).order_by(
        Service.rating.desc(), Service.review_count.desc(), Service.name
    )
    if business_id is not None:
        stmt = stmt.where(Service.business_id == business_id)
    result = await db.execute(stmt.limit(limit))
    return list(result.scalars().all())


async def top_items(db: AsyncSession, limit: int, business_id: str | None = None) -> list[Item]:
    stmt = select(Item).order_by(Item.rating.desc(), Item.review_count.desc(), Item.name)
    if business_id is not None:
        stmt = stmt.where(Item.business_id == business_id)
    result = await db.execute(stmt.limit(limit))
    return list(result.scalars().all())
