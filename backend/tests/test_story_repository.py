"""
Story repository tests: ownership-scoped lookups, StoryQuery filters and
DatabaseError wrapping.
"""

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from conftest import USER_A, USER_B
from traveltales.exceptions import DatabaseError
from traveltales.models.travel_story import TravelStory
from traveltales.repositories.story_repository import StoryQuery, StoryRepository

VISITED = datetime(2023, 6, 5, 12, 0, tzinfo=timezone.utc)


def _story(user_id=USER_A, **overrides):
    fields = dict(
        user_id=user_id,
        title="Harbour walk",
        story="Fish market at dawn.",
        visited_location="Bergen, Norway",
        image_url="http://test/uploads/harbour.jpg",
        visited_date=VISITED,
    )
    fields.update(overrides)
    return TravelStory(**fields)


@pytest.fixture
def repository(database):
    return StoryRepository(database)


@pytest.mark.asyncio
async def test_add_assigns_id_and_timestamps(repository):
    story = await repository.add(_story())

    assert isinstance(story.id, uuid.UUID)
    assert story.created_at is not None
    assert story.is_favorite is False


@pytest.mark.asyncio
async def test_get_owned_requires_matching_owner(repository):
    story = await repository.add(_story())

    found = await repository.get_owned(story.id, USER_A)
    assert found is not None
    assert found.title == "Harbour walk"

    assert await repository.get_owned(story.id, USER_B) is None
    assert await repository.get_owned(uuid.uuid4(), USER_A) is None


@pytest.mark.asyncio
async def test_update_and_delete_are_owner_scoped(repository):
    story = await repository.add(_story())

    assert await repository.update_owned(story.id, USER_B, {"title": "Hijacked"}) is None
    assert await repository.delete_owned(story.id, USER_B) is None

    updated = await repository.update_owned(story.id, USER_A, {"title": "Fjords"})
    assert updated.title == "Fjords"

    deleted = await repository.delete_owned(story.id, USER_A)
    assert deleted.image_url == "http://test/uploads/harbour.jpg"
    assert await repository.get_owned(story.id, USER_A) is None


@pytest.mark.asyncio
async def test_list_owned_with_combined_query(repository):
    await repository.add(_story(title="Bergen rain"))
    match = await repository.add(_story(title="Bergen sun", visited_date=VISITED + timedelta(days=3)))
    await repository.add(_story(user_id=USER_B, title="Bergen fog", visited_date=VISITED + timedelta(days=3)))

    query = StoryQuery(
        search="BERGEN",
        visited_from=VISITED + timedelta(days=1),
        visited_to=VISITED + timedelta(days=5),
    )
    stories = await repository.list_owned(USER_A, query)

    assert [s.id for s in stories] == [match.id]


@pytest.mark.asyncio
async def test_sqlalchemy_errors_become_database_errors(repository):
    failing = MagicMock(side_effect=OperationalError("SELECT 1", {}, Exception("db down")))
    repository.database.session = failing

    with pytest.raises(DatabaseError):
        await repository.list_owned(USER_A)
