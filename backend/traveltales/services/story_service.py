"""
TravelTales Backend: Story Service (Business Rules)
====================================================

What:  Every travel-story operation the API exposes.
How:   Validates input, converts epoch-millisecond dates, enforces ownership
       through the repository's (id, user_id) lookups, and couples story
       deletion to image deletion.
Who:   Constructed once in create_app() with a StoryRepository and a
       FileStore, then reached from route handlers via get_story_service().

Operations (all scoped to the caller's user id):
    add_story          create a story
    list_stories       all stories, favorites first
    search_stories     substring search over title / story / visited_location
    filter_stories     visited_date within [start, end]
    edit_story         replace the editable fields
    update_favorite    set the favorite flag
    delete_story       remove the story and its uploaded image
    upload_image       store an image, return its public URL
    delete_image       remove a stored image by URL

Error Handling Strategy:
    ValidationError   missing/empty fields, malformed id, bad dates or flags
    NotFoundError     story not found for this user (also when owned by another)
    DatabaseError     raised by the repository, propagated unchanged
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, List, Optional

from traveltales.exceptions import NotFoundError, TravelTalesError, ValidationError
from traveltales.models.travel_story import TravelStory
from traveltales.repositories.story_repository import StoryQuery, StoryRepository
from traveltales.schemas.travel_story import TravelStoryOut
from traveltales.services.file_store import FileStore

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE_PATH = "/assets/placeholderImage.png"


def placeholder_image_url(origin: str) -> str:
    """The shared default image URL for a given request origin."""
    return f"{origin}{PLACEHOLDER_IMAGE_PATH}"


def parse_story_id(raw: Any) -> uuid.UUID:
    """
    Parse a story id from a path parameter.

    Raises:
        ValidationError("Invalid ID format") for anything that is not a UUID
    """
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw))
    except (TypeError, ValueError, AttributeError):
        raise ValidationError(message="Invalid ID format", field="id", context={"id": str(raw)})


def epoch_ms_to_datetime(value: Any, field: str) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    try:
        return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        raise ValidationError(
            message=f"'{field}' must be a timestamp in epoch milliseconds",
            field=field,
            context={"value": str(value)},
        )


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def _require_fields(**fields: Any) -> None:
    missing = [name for name, value in fields.items() if _is_missing(value)]
    if missing:
        raise ValidationError(
            message="All fields are required",
            context={"missing": missing},
        )


class StoryService:
    """
    Business logic for travel stories.

    Stateless apart from its two collaborators, which are injected so tests
    can build a service against a throwaway SQLite database and temp directory.
    """

    def __init__(self, repository: StoryRepository, file_store: FileStore):
        self.repository = repository
        self.file_store = file_store

    # ── Create / Read ─────────────────────────────────────────────────────

    async def add_story(
        self,
        user_id: str,
        title: Optional[str],
        story: Optional[str],
        visited_location: Optional[str],
        image_url: Optional[str],
        visited_date: Optional[int],
    ) -> TravelStoryOut:
        """
        Create a story owned by `user_id`.

        Raises:
            ValidationError: any of the five fields missing or empty; nothing is persisted
        """
        _require_fields(
            title=title,
            story=story,
            visitedLocation=visited_location,
            imageUrl=image_url,
            visitedDate=visited_date,
        )

        record = TravelStory(
            user_id=user_id,
            title=title,
            story=story,
            visited_location=visited_location,
            image_url=image_url,
            visited_date=epoch_ms_to_datetime(visited_date, "visitedDate"),
            is_favorite=False,
        )
        record = await self.repository.add(record)
        return TravelStoryOut.model_validate(record)

    async def list_stories(self, user_id: str) -> List[TravelStoryOut]:
        stories = await self.repository.list_owned(user_id)
        return [TravelStoryOut.model_validate(s) for s in stories]

    async def search_stories(self, user_id: str, query: Optional[str]) -> List[TravelStoryOut]:
        """
        Case-insensitive substring search over title, story and visited_location.

        The query is matched literally; % and _ have no wildcard meaning.
        """
        if _is_missing(query):
            raise ValidationError(message="Query is required!", field="query")

        stories = await self.repository.list_owned(user_id, StoryQuery(search=query))
        logger.debug("Search for user %s returned %d stories", user_id, len(stories))
        return [TravelStoryOut.model_validate(s) for s in stories]

    async def filter_stories(
        self,
        user_id: str,
        start_date: Any,
        end_date: Any,
    ) -> List[TravelStoryOut]:
        """
        Stories whose visited_date lies within [start_date, end_date] (epoch ms).

        An inverted range is not an error; it simply matches nothing.
        """
        query = StoryQuery(
            visited_from=epoch_ms_to_datetime(start_date, "startDate"),
            visited_to=epoch_ms_to_datetime(end_date, "endDate"),
        )
        stories = await self.repository.list_owned(user_id, query)
        return [TravelStoryOut.model_validate(s) for s in stories]

    # ── Update ────────────────────────────────────────────────────────────

    async def edit_story(
        self,
        user_id: str,
        story_id: Any,
        title: Optional[str],
        story: Optional[str],
        visited_location: Optional[str],
        image_url: Optional[str],
        visited_date: Optional[int],
        origin: str,
    ) -> TravelStoryOut:
        """
        Replace the editable fields of an owned story.

        A missing imageUrl is replaced by the placeholder URL for `origin`.

        Raises:
            ValidationError: malformed id or missing title/story/visitedLocation/visitedDate
            NotFoundError:   no such story for this user
        """
        _require_fields(
            title=title,
            story=story,
            visitedLocation=visited_location,
            visitedDate=visited_date,
        )
        sid = parse_story_id(story_id)

        changes = {
            "title": title,
            "story": story,
            "visited_location": visited_location,
            "image_url": image_url if not _is_missing(image_url) else placeholder_image_url(origin),
            "visited_date": epoch_ms_to_datetime(visited_date, "visitedDate"),
        }
        record = await self.repository.update_owned(sid, user_id, changes)
        if record is None:
            raise NotFoundError(resource="travel story", resource_id=str(sid),
                                message="Travel story not found!")

        logger.info("Story %s updated", sid)
        return TravelStoryOut.model_validate(record)

    async def update_favorite(
        self,
        user_id: str,
        story_id: Any,
        is_favorite: Any,
    ) -> TravelStoryOut:
        """
        Raises:
            ValidationError: malformed id, or is_favorite is not a bool
            NotFoundError:   no such story for this user
        """
        sid = parse_story_id(story_id)
        if not isinstance(is_favorite, bool):
            raise ValidationError(
                message="isFavorite must be a boolean",
                field="isFavorite",
                context={"value": repr(is_favorite)},
            )

        record = await self.repository.update_owned(sid, user_id, {"is_favorite": is_favorite})
        if record is None:
            raise NotFoundError(resource="travel story", resource_id=str(sid),
                                message="Travel story not found!")
        return TravelStoryOut.model_validate(record)

    # ── Delete ────────────────────────────────────────────────────────────

    async def delete_story(self, user_id: str, story_id: Any, origin: str) -> None:
        """
        Delete an owned story, then its uploaded image.

        The image is left alone when it is the placeholder. Record and file
        deletion are not transactional: if the file cannot be removed, the
        failure is logged and the story stays deleted.

        Raises:
            ValidationError: malformed id
            NotFoundError:   no such story for this user
        """
        sid = parse_story_id(story_id)

        record = await self.repository.delete_owned(sid, user_id)
        if record is None:
            raise NotFoundError(resource="travel story", resource_id=str(sid),
                                message="Travel story not found!")
        logger.info("Story %s deleted", sid)

        image_url = record.image_url
        if not image_url or image_url == placeholder_image_url(origin):
            return

        try:
            await self.file_store.delete_by_url(image_url)
        except NotFoundError:
            logger.warning("Image for deleted story %s was already gone: %s", sid, image_url)
        except TravelTalesError as e:
            logger.warning(
                "Orphaned image left behind for deleted story %s: %s (%s)",
                sid, image_url, e.message,
            )

    # ── Images ────────────────────────────────────────────────────────────

    async def upload_image(
        self,
        filename: Optional[str],
        content: Optional[bytes],
        origin: str,
        content_length: Optional[int] = None,
    ) -> str:
        """
        Store an uploaded image and return its public URL.

        Raises:
            ValidationError:  no file, empty file, unsupported type, too large
            FileStorageError: the file could not be written
        """
        if content is None or not filename:
            raise ValidationError(message="No image uploaded", field="image")

        stored_name = await self.file_store.save(filename, content, content_length)
        return self.file_store.public_url(origin, stored_name)

    async def delete_image(self, image_url: Optional[str]) -> None:
        """
        Raises:
            ValidationError: image_url missing
            NotFoundError:   the file does not exist
        """
        if _is_missing(image_url):
            raise ValidationError(message="imageUrl parameter is required!", field="imageUrl")
        await self.file_store.delete_by_url(image_url)
