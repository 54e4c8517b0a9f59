"""
TravelTales Backend: Story Repository
======================================

What:  All SQL for the travel_stories table.
How:   Each method opens one session from the injected Database, runs a single
       unit of work, and returns detached ORM objects (still readable because
       sessions are created with expire_on_commit=False).

Every read and write is scoped by user_id. Lookups by id always use the
(id, user_id) pair, so "missing" and "owned by someone else" both come back
as None and callers cannot tell them apart.

SQLAlchemy failures are translated into DatabaseError here so that the
service layer only deals with application exceptions.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import Select, asc, desc, or_, select
from sqlalchemy.exc import SQLAlchemyError

from traveltales.database import Database
from traveltales.exceptions import DatabaseError
from traveltales.models.travel_story import TravelStory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoryQuery:
    """
    Optional filters for list_owned().

    search:        case-insensitive literal substring of title, story or visited_location
    visited_from:  inclusive lower bound on visited_date
    visited_to:    inclusive upper bound on visited_date
    """
    search: Optional[str] = None
    visited_from: Optional[datetime] = None
    visited_to: Optional[datetime] = None

    def apply(self, query: Select) -> Select:
        if self.search:
            query = query.where(
                or_(
                    TravelStory.title.icontains(self.search, autoescape=True),
                    TravelStory.story.icontains(self.search, autoescape=True),
                    TravelStory.visited_location.icontains(self.search, autoescape=True),
                )
            )
        if self.visited_from is not None:
            query = query.where(TravelStory.visited_date >= self.visited_from)
        if self.visited_to is not None:
            query = query.where(TravelStory.visited_date <= self.visited_to)
        return query


class StoryRepository:
    """Persistence operations for TravelStory, always scoped to one owner."""

    def __init__(self, database: Database):
        self.database = database

    async def add(self, story: TravelStory) -> TravelStory:
        try:
            async with self.database.session() as session:
                session.add(story)
                await session.flush()
            logger.info("Story %s created for user %s", story.id, story.user_id)
            return story
        except SQLAlchemyError as e:
            logger.error("Database error creating story: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "add", "error_type": type(e).__name__}) from e

    async def get_owned(self, story_id: uuid.UUID, user_id: str) -> Optional[TravelStory]:
        try:
            async with self.database.session() as session:
                return await session.scalar(self._owned(story_id, user_id))
        except SQLAlchemyError as e:
            logger.error("Database error fetching story %s: %s", story_id, str(e))
            raise DatabaseError(context={"operation": "get", "story_id": str(story_id)}) from e

    async def list_owned(
        self,
        user_id: str,
        query: Optional[StoryQuery] = None,
    ) -> List[TravelStory]:
        """
        Return the user's stories, favorites first.

        Query plan:
            SELECT * FROM travel_stories WHERE user_id = :uid [AND filters]
            ORDER BY is_favorite DESC, created_at ASC, id ASC
        """
        stmt = select(TravelStory).where(TravelStory.user_id == user_id)
        if query is not None:
            stmt = query.apply(stmt)
        stmt = stmt.order_by(
            desc(TravelStory.is_favorite),
            asc(TravelStory.created_at),
            asc(TravelStory.id),
        )

        try:
            async with self.database.session() as session:
                result = await session.scalars(stmt)
                return list(result.all())
        except SQLAlchemyError as e:
            logger.error("Database error listing stories: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "list", "error_type": type(e).__name__}) from e

    async def update_owned(
        self,
        story_id: uuid.UUID,
        user_id: str,
        changes: Dict[str, Any],
    ) -> Optional[TravelStory]:
        """Apply `changes` to the owned story in one transaction; None if not owned."""
        try:
            async with self.database.session() as session:
                story = await session.scalar(self._owned(story_id, user_id))
                if story is None:
                    return None
                for field, value in changes.items():
                    setattr(story, field, value)
                await session.flush()
                return story
        except SQLAlchemyError as e:
            logger.error("Database error updating story %s: %s", story_id, str(e))
            raise DatabaseError(context={"operation": "update", "story_id": str(story_id)}) from e

    async def delete_owned(self, story_id: uuid.UUID, user_id: str) -> Optional[TravelStory]:
        """Delete the owned story and return it (detached); None if not owned."""
        try:
            async with self.database.session() as session:
                story = await session.scalar(self._owned(story_id, user_id))
                if story is None:
                    return None
                await session.delete(story)
                await session.flush()
                return story
        except SQLAlchemyError as e:
            logger.error("Database error deleting story %s: %s", story_id, str(e))
            raise DatabaseError(context={"operation": "delete", "story_id": str(story_id)}) from e

    @staticmethod
    def _owned(story_id: uuid.UUID, user_id: str) -> Select:
        return select(TravelStory).where(
            TravelStory.id == story_id,
            TravelStory.user_id == user_id,
        )
