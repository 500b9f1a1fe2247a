"""Factory functions for creating model instances in tests."""

from decimal import Decimal
from typing import Any

from pos_reviews.models import Business, Item, Service, Staff, StaffSession


def make_business(*, name: str = "Harbor Cafe", admin_id: str | None = "admin-1") -> Business:
    return Business(name=name, admin_id=admin_id)


def make_service(
    *,
    business_id: str,
    name: str = "Coffee Bar",
    rating: float = 0.0,
    review_count: int = 0,
) -> Service:
    return Service(business_id=business_id, name=name, rating=rating, review_count=review_count)


def make_item(
    *,
    business_id: str,
    service_id: str,
    name: str = "Espresso",
    price: Decimal = Decimal("3.50"),
    category: str = "drinks",
    rating: float = 0.0,
    review_count: int = 0,
) -> Item:
    return Item(
        business_id=business_id,
        service_id=service_id,
        name=name,
        price=price,
        category=category,
        rating=rating,
        review_count=review_count,
    )


def make_staff(
    *,
    business_id: str,
    name: str = "Dana Ortiz",
    pin: str = "482913",
    rating: float = 0.0,
    review_count: int = 0,
) -> Staff:
    return Staff(
        business_id=business_id, name=name, pin=pin, rating=rating, review_count=review_count
    )


def make_session(
    *,
    staff_id: str,
    items: list[dict[str, Any]] | None = None,
    total_amount: Decimal = Decimal("7.00"),
) -> StaffSession:
    return StaffSession(staff_id=staff_id, items=items or [], total_amount=total_amount)


def line_item(item: Item) -> dict[str, Any]:
    """A session line item in the stored JSON shape."""
    return {
        "itemId": item.id,
        "businessId": item.business_id,
        "serviceId": item.service_id,
        "name": item.name,
        "price": float(item.price),
    }
