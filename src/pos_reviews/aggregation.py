"""Running-average arithmetic for rated entities.

Every rated entity carries a (rating, review_count) pair where ``rating`` is
the count-weighted mean of everything that contributed to it. Staff and items
receive ratings one at a time; services and businesses are rolled up from
their children. Nothing here touches the database.
"""

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class RatingAggregate:
    """A running mean together with the number of ratings behind it."""

    rating: float = 0.0
    review_count: int = 0

    @property
    def total(self) -> float:
        """Sum of the contributing ratings."""
        return self.rating * self.review_count


def apply_rating(current: RatingAggregate, value: float) -> RatingAggregate:
    """Fold one new rating into a running mean.

    (old * n + value) / (n + 1); the denominator is never below 1.
    """
    count = current.review_count + 1
    return RatingAggregate(rating=(current.total + value) / count, review_count=count)


def rollup(children: Iterable[RatingAggregate]) -> RatingAggregate:
    """Weighted mean of child aggregates.

    Children with no reviews are left out so untouched items or services do not
    drag the parent toward zero. No qualifying children yields (0.0, 0).
    """
    total = 0.0
    count = 0
    for child in children:
        if child.review_count <= 0:
            continue
        total += child.total
        count += child.review_count
    if count == 0:
        return RatingAggregate()
    return RatingAggregate(rating=total / count, review_count=count)
