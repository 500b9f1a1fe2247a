"""Session and rating request/response schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import Field

from pos_reviews.schemas.base import CamelModel
from pos_reviews.schemas.pagination import PaginatedResponse


class SessionItem(CamelModel):
    """A purchased line item recorded on a session."""

    item_id: str
    business_id: str
    service_id: str
    name: str
    price: float = Field(ge=0)


class SessionCreate(CamelModel):
    staff_id: str
    items: list[SessionItem] = Field(min_length=1)
    total_amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)


class ItemRatingIn(CamelModel):
    business_id: str
    service_id: str
    item_id: str
    rating: float = Field(ge=1, le=5)


class RatingSubmission(CamelModel):
    """Body of POST /sessions/{id}/rating.

    Either field may be omitted, but not both; that rule is enforced by the
    rating service so it returns the domain validation_error envelope.
    """

    staff_rating: float | None = Field(default=None, ge=1, le=5)
    comment: str | None = Field(default=None, max_length=2000)
    item_ratings: list[ItemRatingIn] = Field(default_factory=list)


class SessionRatings(CamelModel):
    """Ratings payload as stored on a rated session."""

    staff_rating: float | None = None
    comment: str | None = None
    item_ratings: list[ItemRatingIn] = Field(default_factory=list)


class SessionResponse(CamelModel):
    id: str
    staff_id: str
    items: list[SessionItem]
    total_amount: Decimal
    rated: bool
    ratings: SessionRatings | None
    rated_at: datetime | None
    verified: bool
    verified_at: datetime | None
    created_at: datetime


class RatingResponse(CamelModel):
    success: bool = True
    message: str = "Rating submitted successfully"
    session_id: str
    ratings: SessionRatings
    skipped_item_ratings: list[ItemRatingIn]


class VerificationResponse(CamelModel):
    success: bool = True
    message: str = "Session rating verified by admin"
    session_id: str
    verified_at: datetime | None


SessionListResponse = PaginatedResponse[SessionResponse]
