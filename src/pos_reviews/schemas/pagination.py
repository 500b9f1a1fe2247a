"""Generic pagination types shared by list endpoints.

PaginatedResponse[T] is the serializable HTTP shape; Paginated[T] is the plain
dataclass services return so they stay free of Pydantic.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """Paginated HTTP response.

    ``from_attributes`` lets ``model_validate`` read a ``Paginated`` directly::

        result = await list_staff_sessions(db, staff_id, skip, limit)
        return SessionListResponse.model_validate(result)
    """

    model_config = {"from_attributes": True}

    items: list[T]
    total: int
    skip: int
    limit: int


@dataclass
class Paginated(Generic[T]):
    """A page of service-layer results plus pagination metadata."""

    items: list[T]
    total: int
    skip: int
    limit: int
