"""
TravelTales Backend: TravelStory SQLAlchemy Model
==================================================

What:  ORM model representing the `travel_stories` table.
How:   Inherits from the shared DeclarativeBase; Alembic reads this for migrations.
Who:   Used by StoryRepository for CRUD operations.

Table Design:
    - UUID primary key: opaque, not guessable, assigned on insert
    - user_id: owning user from the access token; every query filters on it
    - image_url: absolute URL (uploaded file or the shared placeholder)
    - visited_date: when the trip happened (UTC); range-filtered
    - is_favorite: favorites are listed first in every result set
    - created_at / updated_at: UTC, maintained on write

Query Patterns:
    - List a user's stories:  WHERE user_id = :uid ORDER BY is_favorite DESC, created_at
      → idx_travel_stories_user_favorite
    - Ownership lookup:       WHERE id = :id AND user_id = :uid
      → primary key
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Index, String, Text, Uuid, false, text
from sqlalchemy.orm import Mapped, mapped_column

from traveltales.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TravelStory(Base):
    """
    A single travel log entry owned by exactly one user.

    Lifecycle:
        1. Created by StoryService.add_story()
        2. Mutated in place by edit_story() / update_favorite()
        3. Deleted by delete_story(), which also removes the uploaded image
    """

    __tablename__ = "travel_stories"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Opaque story identifier",
    )

    # Immutable after creation
    user_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Owning user identifier (from the access token)",
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    story: Mapped[str] = mapped_column(Text, nullable=False)

    visited_location: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Free-form list of places, e.g. 'Venice, Italy'",
    )

    image_url: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Absolute URL to an uploaded image or the placeholder",
    )

    visited_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="When the trip took place (UTC)",
    )

    is_favorite: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_travel_stories_user_id", "user_id"),
        Index("idx_travel_stories_user_favorite", "user_id", "is_favorite"),
    )

    def __repr__(self) -> str:
        return (
            f"<TravelStory(id={self.id}, user_id='{self.user_id}', "
            f"is_favorite={self.is_favorite})>"
        )
