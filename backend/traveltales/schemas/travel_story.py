"""
TravelTales Backend: Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the API contract between frontend and backend.
How:   FastAPI uses these models to parse request bodies, serialize responses,
       and generate OpenAPI documentation. Field names are snake_case in Python
       and camelCase on the wire (`visitedLocation`, `isFavorite`, ...).

Input models deliberately make the story fields Optional: presence and
emptiness are business rules enforced by StoryService, which reports them as
a 400 "All fields are required" instead of a schema error per field.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator
from pydantic.alias_generators import to_camel

CAMEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class StoryCreateRequest(BaseModel):
    """
    Body of POST /api/travel-story.

    visitedDate is epoch milliseconds; numeric strings are accepted.
    """
    model_config = CAMEL_CONFIG

    title: Optional[str] = None
    story: Optional[str] = None
    visited_location: Optional[str] = None
    image_url: Optional[str] = None
    visited_date: Optional[int] = Field(default=None, description="Epoch milliseconds")


class StoryUpdateRequest(StoryCreateRequest):
    """Body of PUT /api/travel-story/{id}. Omitting imageUrl selects the placeholder."""


class FavoriteUpdateRequest(BaseModel):
    """Body of PUT /api/travel-story/{id}/favorite. Only real JSON booleans are accepted."""
    model_config = CAMEL_CONFIG

    is_favorite: StrictBool


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class TravelStoryOut(BaseModel):
    """
    Full representation of a travel story.

    Datetimes are always returned timezone-aware (UTC). SQLite hands back
    naive values, so they are tagged here.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: uuid.UUID
    user_id: str
    title: str
    story: str
    visited_location: str
    image_url: str
    visited_date: datetime
    is_favorite: bool
    created_at: datetime
    updated_at: datetime

    @field_validator("visited_date", "created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class StoryResponse(BaseModel):
    """Returned by add, edit and favorite."""
    story: TravelStoryOut
    message: str


class StoryListResponse(BaseModel):
    """Returned by list, search and filter. Favorites come first."""
    stories: List[TravelStoryOut]


class ImageUploadResponse(BaseModel):
    model_config = CAMEL_CONFIG

    image_url: str


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """
    Uniform error body for every failure.

    Example:
        {"success": false, "statusCode": 404, "message": "Travel story not found!"}
    """
    model_config = CAMEL_CONFIG

    success: bool = False
    status_code: int
    message: str


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer checks."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
