"""Session endpoints: lifecycle, rating submission and admin verification.

Callers are authenticated upstream; these handlers trust the ids they receive.
"""

from fastapi import APIRouter, Query

from pos_reviews.dependencies import DB
from pos_reviews.schemas.session import (
    ItemRatingIn,
    RatingResponse,
    RatingSubmission,
    SessionCreate,
    SessionListResponse,
    SessionRatings,
    SessionResponse,
    VerificationResponse,
)
from pos_reviews.services import session as session_service
from pos_reviews.services.rating import ItemRating, submit_session_rating

router = APIRouter(tags=["sessions"])


@router.post("/sessions", response_model=SessionResponse, status_code=201)
async def create_session(db: DB, body: SessionCreate) -> SessionResponse:
    """Open a new session for a staff member."""
    items = [item.model_dump(by_alias=True) for item in body.items]
    session = await session_service.create_session(db, body.staff_id, items, body.total_amount)
    return SessionResponse.model_validate(session)


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(db: DB, session_id: str) -> SessionResponse:
    session = await session_service.get_session(db, session_id)
    return SessionResponse.model_validate(session)


@router.get("/staff/{staff_id}/sessions", response_model=SessionListResponse)
async def list_staff_sessions(
    db: DB,
    staff_id: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
) -> SessionListResponse:
    """List a staff member's sessions, newest first."""
    result = await session_service.list_staff_sessions(db, staff_id, skip, limit)
    return SessionListResponse.model_validate(result)


@router.post("/sessions/{session_id}/rating", response_model=RatingResponse)
async def rate_session(db: DB, session_id: str, body: RatingSubmission) -> RatingResponse:
    """Submit the one-time rating for a session.

    400 when no rating is given, 404 for an unknown session, 409 when the
    session is already rated. Item ratings pointing at unknown items are
    skipped and echoed back in skippedItemRatings.
    """
    result = await submit_session_rating(
        db,
        session_id,
        staff_rating=body.staff_rating,
        comment=body.comment,
        item_ratings=[
            ItemRating(
                business_id=entry.business_id,
                service_id=entry.service_id,
                item_id=entry.item_id,
                rating=entry.rating,
            )
            for entry in body.item_ratings
        ],
    )
    return RatingResponse(
        session_id=result.session_id,
        ratings=SessionRatings.model_validate(result.ratings),
        skipped_item_ratings=[
            ItemRatingIn.model_validate(entry.to_payload()) for entry in result.skipped_item_ratings
        ],
    )


@router.post("/sessions/{session_id}/verify", response_model=VerificationResponse)
async def verify_session(db: DB, session_id: str) -> VerificationResponse:
    """Admin verification of a session rating. Safe to repeat."""
    session = await session_service.verify_session_rating(db, session_id)
    return VerificationResponse(session_id=session.id, verified_at=session.verified_at)
