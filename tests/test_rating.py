"""Rating aggregator tests against the service layer."""

from datetime import UTC, datetime

import pytest

from pos_reviews.exceptions import NotFoundError, SessionAlreadyRatedError, ValidationError
from pos_reviews.models import Item
from pos_reviews.repositories.session import claim_for_rating
from pos_reviews.services.rating import (
    ItemRating,
    recompute_business_rating,
    recompute_service_rating,
    submit_session_rating,
)
from tests.factories import make_session
from tests.seeds import Catalog


def _rate(item: Item, value: float) -> ItemRating:
    return ItemRating(
        business_id=item.business_id, service_id=item.service_id, item_id=item.id, rating=value
    )


async def _new_session(catalog: Catalog, staff_id: str | None = None) -> str:
    session = make_session(staff_id=staff_id or catalog.dana.id)
    catalog.db.add(session)
    await catalog.db.flush()
    return session.id


@pytest.mark.asyncio
async def test_staff_rating_updates_running_mean(catalog: Catalog) -> None:
    await submit_session_rating(catalog.db, catalog.session.id, staff_rating=5)

    await catalog.db.refresh(catalog.dana)
    assert catalog.dana.rating == pytest.approx(13 / 3)
    assert catalog.dana.review_count == 3


@pytest.mark.asyncio
async def test_item_rating_rolls_up_to_service_and_business(catalog: Catalog) -> None:
    await submit_session_rating(
        catalog.db, catalog.session.id, item_ratings=[_rate(catalog.espresso, 5)]
    )

    for entity in (catalog.espresso, catalog.cold_brew, catalog.coffee_bar, catalog.cafe):
        await catalog.db.refresh(entity)

    assert catalog.espresso.rating == pytest.approx(4.0)
    assert catalog.espresso.review_count == 2
    # Cold brew was never rated and stays out of the rollup
    assert catalog.cold_brew.rating == 0
    assert catalog.cold_brew.review_count == 0
    assert catalog.coffee_bar.rating == pytest.approx(4.0)
    assert catalog.coffee_bar.review_count == 2
    # Bakery has no reviews, so the cafe equals its coffee bar
    assert catalog.cafe.rating == pytest.approx(4.0)
    assert catalog.cafe.review_count == 2


@pytest.mark.asyncio
async def test_ratings_across_services_weight_the_business(catalog: Catalog) -> None:
    await submit_session_rating(
        catalog.db,
        catalog.session.id,
        item_ratings=[
            _rate(catalog.espresso, 5),
            _rate(catalog.cold_brew, 2),
            _rate(catalog.croissant, 4),
        ],
    )

    for entity in (catalog.coffee_bar, catalog.bakery, catalog.cafe, catalog.salon):
        await catalog.db.refresh(entity)

    # Coffee bar: espresso (4.0, 2) + cold brew (2.0, 1) -> 10 / 3
    assert catalog.coffee_bar.rating == pytest.approx(10 / 3)
    assert catalog.coffee_bar.review_count == 3
    assert catalog.bakery.rating == pytest.approx(4.0)
    assert catalog.bakery.review_count == 1
    # Cafe: (10 + 4) / 4
    assert catalog.cafe.rating == pytest.approx(3.5)
    assert catalog.cafe.review_count == 4
    # Untouched business keeps its numbers
    assert catalog.salon.rating == pytest.approx(5.0)
    assert catalog.salon.review_count == 1


@pytest.mark.asyncio
async def test_unknown_item_is_skipped_and_reported(catalog: Catalog) -> None:
    ghost = ItemRating(
        business_id=catalog.cafe.id,
        service_id=catalog.bakery.id,
        item_id="does-not-exist",
        rating=1,
    )
    result = await submit_session_rating(
        catalog.db, catalog.session.id, staff_rating=4, item_ratings=[ghost]
    )

    assert result.skipped_item_ratings == [ghost]
    await catalog.db.refresh(catalog.bakery)
    assert catalog.bakery.review_count == 0
    assert catalog.bakery.rating == 0


@pytest.mark.asyncio
async def test_item_under_wrong_service_counts_as_missing(catalog: Catalog) -> None:
    misplaced = ItemRating(
        business_id=catalog.cafe.id,
        service_id=catalog.bakery.id,
        item_id=catalog.espresso.id,
        rating=1,
    )
    result = await submit_session_rating(catalog.db, catalog.session.id, item_ratings=[misplaced])

    assert result.skipped_item_ratings == [misplaced]
    await catalog.db.refresh(catalog.espresso)
    assert catalog.espresso.review_count == 1


@pytest.mark.asyncio
async def test_session_stores_payload_and_flips_rated(catalog: Catalog) -> None:
    result = await submit_session_rating(
        catalog.db,
        catalog.session.id,
        staff_rating=5,
        comment="Great espresso",
        item_ratings=[_rate(catalog.espresso, 4.5)],
    )

    await catalog.db.refresh(catalog.session)
    assert catalog.session.rated is True
    assert catalog.session.rated_at is not None
    assert catalog.session.ratings == result.ratings
    assert catalog.session.ratings == {
        "staffRating": 5,
        "comment": "Great espresso",
        "itemRatings": [
            {
                "businessId": catalog.cafe.id,
                "serviceId": catalog.coffee_bar.id,
                "itemId": catalog.espresso.id,
                "rating": 4.5,
            }
        ],
    }


@pytest.mark.asyncio
async def test_second_submission_conflicts_and_changes_nothing(catalog: Catalog) -> None:
    await submit_session_rating(
        catalog.db,
        catalog.session.id,
        staff_rating=5,
        item_ratings=[_rate(catalog.espresso, 5)],
    )

    with pytest.raises(SessionAlreadyRatedError):
        await submit_session_rating(
            catalog.db,
            catalog.session.id,
            staff_rating=1,
            item_ratings=[_rate(catalog.espresso, 1)],
        )

    for entity in (catalog.dana, catalog.espresso, catalog.coffee_bar, catalog.cafe):
        await catalog.db.refresh(entity)
    assert catalog.dana.review_count == 3
    assert catalog.dana.rating == pytest.approx(13 / 3)
    assert catalog.espresso.review_count == 2
    assert catalog.espresso.rating == pytest.approx(4.0)
    assert catalog.coffee_bar.rating == pytest.approx(4.0)
    assert catalog.cafe.review_count == 2


@pytest.mark.asyncio
async def test_several_sessions_average_the_staff_rating(catalog: Catalog) -> None:
    values = [5, 1, 3, 4]
    for value in values:
        session_id = await _new_session(catalog, staff_id=catalog.lee.id)
        await submit_session_rating(catalog.db, session_id, staff_rating=value)

    await catalog.db.refresh(catalog.lee)
    assert catalog.lee.rating == pytest.approx(sum(values) / len(values))
    assert catalog.lee.review_count == len(values)


@pytest.mark.asyncio
async def test_empty_submission_is_rejected(catalog: Catalog) -> None:
    with pytest.raises(ValidationError):
        await submit_session_rating(catalog.db, catalog.session.id, comment="nothing to rate")

    await catalog.db.refresh(catalog.session)
    assert catalog.session.rated is False


@pytest.mark.asyncio
async def test_unknown_session_is_not_found(catalog: Catalog) -> None:
    with pytest.raises(NotFoundError):
        await submit_session_rating(catalog.db, "missing-session", staff_rating=3)


@pytest.mark.asyncio
async def test_service_recompute_is_idempotent(catalog: Catalog) -> None:
    first = await recompute_service_rating(catalog.db, catalog.cafe.id, catalog.coffee_bar.id)
    snapshot = (first.rating, first.review_count)
    second = await recompute_service_rating(catalog.db, catalog.cafe.id, catalog.coffee_bar.id)

    assert (second.rating, second.review_count) == snapshot == (3.0, 1)


@pytest.mark.asyncio
async def test_recompute_repairs_drifted_aggregates(catalog: Catalog) -> None:
    catalog.coffee_bar.rating, catalog.coffee_bar.review_count = 1.0, 40
    await catalog.db.flush()

    service = await recompute_service_rating(catalog.db, catalog.cafe.id, catalog.coffee_bar.id)
    business = await recompute_business_rating(catalog.db, catalog.cafe.id)

    assert (service.rating, service.review_count) == (3.0, 1)
    assert (business.rating, business.review_count) == (3.0, 1)


@pytest.mark.asyncio
async def test_recompute_unknown_parent_is_not_found(catalog: Catalog) -> None:
    with pytest.raises(NotFoundError):
        await recompute_service_rating(catalog.db, catalog.salon.id, catalog.coffee_bar.id)
    with pytest.raises(NotFoundError):
        await recompute_business_rating(catalog.db, "missing-business")


@pytest.mark.asyncio
async def test_only_the_first_claim_wins(catalog: Catalog) -> None:
    now = datetime.now(UTC)
    first = await claim_for_rating(catalog.db, catalog.session.id, {"staffRating": 5}, now)
    second = await claim_for_rating(catalog.db, catalog.session.id, {"staffRating": 1}, now)

    assert first is True
    assert second is False
    await catalog.db.refresh(catalog.session)
    assert catalog.session.ratings == {"staffRating": 5}
